#!/usr/bin/env python3
"""
Check a Cosmos DB account end to end through the stores.

Signs a throwaway user in, migrates a few local items, writes through
every store, signs out and back in, verifies what came back, and deletes
the user's documents.

Usage:
    export TIMBER_COSMOS_ENDPOINT=https://<account>.documents.azure.com:443/
    python scripts/check_cosmos_connection.py
"""

import asyncio
import sys
import uuid

from timber_storage import (
    CosmosConfig,
    CosmosDocumentClient,
    HuntLog,
    HuntPlan,
    InventoryItem,
    MemoryKeyValueStore,
    SessionIdentityProvider,
    TimberStorage,
)


async def check_connection() -> int:
    config = CosmosConfig.from_env()
    user_id = f"check-user-{uuid.uuid4().hex[:8]}"

    print(f"Connecting to: {config.endpoint}")
    print(f"Database: {config.database_name}")
    print(f"Container: {config.container_name}")
    print(f"Auth method: {config.auth_method}")
    print(f"User: {user_id}")
    print()

    remote = CosmosDocumentClient(config)
    await remote.initialize()

    identity = SessionIdentityProvider()
    storage = TimberStorage(identity, MemoryKeyValueStore(), remote)

    try:
        await storage.start()
        await identity.initialize()

        print("1. Adding local items while signed out...")
        for name, category in (("Shotgun", "Firearm"), ("Mallard Decoys", "Decoy")):
            await storage.inventory.add(InventoryItem.new(name, category))
        print(f"   ✓ {len(storage.inventory.list())} local item(s)")

        print("2. Signing in (first sign-in migration)...")
        await identity.sign_in(user_id)
        print(f"   ✓ {len(storage.inventory.list())} remote item(s) after migration")

        print("3. Writing a plan and a log that completes it...")
        plan = await storage.hunts.add_plan(HuntPlan.new("Connection check", "2025-11-02", "Test Marsh"))
        log = await storage.hunts.add_log(HuntLog.new("2025-11-02", "Test Marsh", plan_id=plan.id))
        await storage.profile.set_hunter_profile("Connection Check", "first")
        await storage.flush()
        failures = [f for store in storage.stores for f in store.sync.failures]
        if failures:
            for failure in failures:
                print(f"   ✗ {failure.operation}: {failure.error}")
            return 1
        print("   ✓ Remote writes confirmed")

        print("4. Signing out and back in...")
        await identity.sign_out()
        await identity.sign_in(user_id)
        reloaded = storage.hunts.get_plan(plan.id)
        if reloaded is None or reloaded.result_log_id != log.id:
            print("   ✗ Plan completion link did not round-trip")
            return 1
        print(f"   ✓ Plan completed by log {log.id}")
        print(f"   ✓ Profile name: {storage.profile.profile.hunter_name}")

        print("5. Cleaning up...")
        for collection in ("inventory", "huntLogs", "huntPlans", "profile"):
            deleted = await remote.delete_all(user_id, collection)
            print(f"   ✓ {collection}: {deleted} document(s) deleted")

        print()
        print("=" * 50)
        print("ALL CHECKS PASSED! Cosmos DB connection working.")
        print("=" * 50)
        return 0

    except Exception as e:
        print(f"\n❌ Error: {type(e).__name__}: {e}")
        raise
    finally:
        await storage.stop()


if __name__ == "__main__":
    sys.exit(asyncio.run(check_connection()))
