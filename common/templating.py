"""
QuickShop - Template Configuration
===================================
Jinja2 templates setup with custom filters and global functions.
"""

import os

from fastapi.templating import Jinja2Templates

from config.settings import SHOP_NAME
from common.helpers import format_price, format_datetime
from common.flash import get_flashed_messages

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")
templates = Jinja2Templates(directory=TEMPLATE_DIR)


# ==========================================
# Register Filters & Globals
# ==========================================

# Filters (usage in template: {{ value | price }})
templates.env.filters["price"] = format_price
templates.env.filters["datetime"] = format_datetime

STATIC_VERSION = "1.0"
templates.env.globals["STATIC_VER"] = STATIC_VERSION
templates.env.globals["SHOP_NAME"] = SHOP_NAME

# Flash messages: available in templates via get_flashed_messages(request)
templates.env.globals["get_flashed_messages"] = get_flashed_messages
