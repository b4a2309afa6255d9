import os
import sys

# Ensure backend package is importable when running `pytest` from repo root
BASE_DIR = os.path.dirname(__file__)
BACKEND_DIR = os.path.join(BASE_DIR, 'backend')
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

# Storefront tests never need a real catalog or Redis.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'bondex.settings')
os.environ.setdefault('BONDEX_CATALOG_API_URL', 'http://catalog.test/api')
os.environ.setdefault('BONDEX_CART_STORAGE', 'session')
