import json
import sys

from shared.record_store import StorageUnavailable
from store_service.main import Settings, build_store


def main() -> int:
    settings = Settings()
    store = build_store(settings)

    try:
        carts = store.load("carts")
    except StorageUnavailable as e:
        print(f"❌ Failed to read carts: {e}")
        print(f"Make sure the service has started at least once (backend: {settings.storage_backend})")
        return 1

    print(f"✅ Found {len(carts)} carts:\n")

    if not carts:
        print("No carts found. Create one via the API first, e.g.:")
        print(f"\ncurl -X POST http://localhost:{settings.service_port}/api/carts \\")
        print('  -H "Content-Type: application/json" \\')
        print("  -d '{}'\n")
        return 0

    for cart in carts:
        lines = cart.get("products", [])
        quantities = [line.get("quantity") for line in lines if isinstance(line, dict)]
        units = sum(q for q in quantities if isinstance(q, (int, float)) and not isinstance(q, bool))
        print(f"🛒 Cart: {cart.get('id')}")
        print(f"📦 Lines: {len(lines)}, units: {units}")
        print(f"Items: {json.dumps(lines, indent=2)}")
        print("-" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
