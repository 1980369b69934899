"""Local storage keys and remote collection names.

Each store owns its keys exclusively; no two stores share one.
"""

# Local keys
PROFILE_KEY = "timber_user_profile"
ONBOARDING_KEY = "timber_onboarding"
INVENTORY_KEY = "timber_inventory"
HUNT_LOGS_KEY = "timber_hunt_logs"
HUNT_PLANS_KEY = "timber_hunt_plans"

# One-shot migration markers (list of user ids already migrated)
INVENTORY_MIGRATED_KEY = "timber_inventory_migrated"
HUNT_LOGS_MIGRATED_KEY = "timber_hunt_logs_migrated"
HUNT_PLANS_MIGRATED_KEY = "timber_hunt_plans_migrated"

# Interrupted migrations: {user_id: {local_id: remote_id}}
INVENTORY_MIGRATION_PENDING_KEY = "timber_inventory_migration_pending"
HUNT_LOGS_MIGRATION_PENDING_KEY = "timber_hunt_logs_migration_pending"
HUNT_PLANS_MIGRATION_PENDING_KEY = "timber_hunt_plans_migration_pending"

# Pre-unification keys, folded into the profile once
LEGACY_PREFERENCES_KEY = "talkin_timber_preferences"

# Remote collections (scoped under users/{user_id})
PROFILE_COLLECTION = "profile"
PROFILE_DOCUMENT_ID = "data"
INVENTORY_COLLECTION = "inventory"
HUNT_LOGS_COLLECTION = "huntLogs"
HUNT_PLANS_COLLECTION = "huntPlans"
