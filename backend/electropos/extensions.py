# Overview: Flask extension wiring for the REST data store.

from flask import Flask, current_app

from .data_store import DataStore


def init_data_store(app: Flask) -> DataStore:
    """
    Build the application's single DataStore from configuration.

    DATA_STORE_TRANSPORT lets tests swap in an httpx.MockTransport.
    """
    store = DataStore(
        base_url=app.config["DATA_STORE_URL"],
        timeout=app.config["DATA_STORE_TIMEOUT"],
        transport=app.config.get("DATA_STORE_TRANSPORT"),
    )
    app.extensions["data_store"] = store
    return store


def get_data_store() -> DataStore:
    return current_app.extensions["data_store"]
