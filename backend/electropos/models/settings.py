from __future__ import annotations


UI_SCALE_MIN = 12
UI_SCALE_MAX = 20

DEFAULT_DASHBOARD_PREFERENCES = {
    "showTodayStats": True,
    "showPeriodicStats": True,
    "showRecentInvoices": True,
    "showInventoryWorth": True,
    "showLogistics": True,
    "showLowStock": True,
}

DEFAULT_SHOP_DETAILS = {
    "storeName": "My Electronics Shop",
    "addressLine1": "Main Market, City Center",
    "addressLine2": "",
    "phone": "",
    "email": "contact@shop.com",
    "website": "",
    "VATIn": "",
    "logo": "",
    "headerText": "Tax Invoice",
    "footerText": "Thank you for your business!",
    "uiScale": 14,
    "dashboardPreferences": DEFAULT_DASHBOARD_PREFERENCES,
}
