"""
Seed Permissions and Roles Script
Populates the permissions, roles and role_permissions tables from
app.config.permissions_config. Safe to re-run.

    python -m app.scripts.seed_permissions_roles
"""

import logging
import sys

from supabase import Client

from app.config.permissions_config import PERMISSION_MATRIX
from app.database.supabase_client import get_service_supabase

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_permissions(supabase: Client) -> int:
    """Upsert every permission of the catalogue by key"""
    logger.info("Seeding permissions...")

    created_count = 0
    updated_count = 0

    for perm in PERMISSION_MATRIX["permissions"]:
        fields = {
            "name": perm["name"],
            "group_name": perm["group_name"],
            "description": perm["description"]
        }
        try:
            existing = supabase.table("permissions")\
                .select("id")\
                .eq("key", perm["key"])\
                .execute()

            if existing.data:
                supabase.table("permissions")\
                    .update(fields)\
                    .eq("key", perm["key"])\
                    .execute()
                updated_count += 1
            else:
                supabase.table("permissions").insert({"key": perm["key"], **fields}).execute()
                created_count += 1
                logger.debug(f"Created permission: {perm['key']}")
        except Exception as e:
            logger.error(f"Error processing permission {perm['key']}: {e}")

    logger.info(f"Permissions seeded: {created_count} created, {updated_count} updated")
    return created_count + updated_count


def seed_roles(supabase: Client) -> int:
    """Create or refresh the system roles and their permission sets"""
    logger.info("Seeding roles...")

    created_count = 0
    updated_count = 0

    for role in PERMISSION_MATRIX["roles"]:
        fields = {
            "description": role["description"],
            "role_type": role["role_type"],
            "is_system_role": True
        }
        try:
            existing = supabase.table("roles")\
                .select("id")\
                .eq("name", role["name"])\
                .execute()

            if existing.data:
                supabase.table("roles")\
                    .update(fields)\
                    .eq("name", role["name"])\
                    .execute()
                role_id = existing.data[0]["id"]
                updated_count += 1
            else:
                result = supabase.table("roles").insert({"name": role["name"], **fields}).execute()
                role_id = result.data[0]["id"]
                created_count += 1
                logger.debug(f"Created role: {role['name']}")

            sync_role_permissions(supabase, role_id, role["name"], role["permissions"])
        except Exception as e:
            logger.error(f"Error processing role {role['name']}: {e}")

    logger.info(f"Roles seeded: {created_count} created, {updated_count} updated")
    return created_count + updated_count


def sync_role_permissions(supabase: Client, role_id: str, role_name: str, permission_keys: list):
    """Make the role's permission set equal to permission_keys"""
    try:
        permission_result = supabase.table("permissions")\
            .select("id")\
            .in_("key", permission_keys)\
            .execute()

        if not permission_result.data:
            logger.warning(f"No permissions found for role {role_name}")
            return

        permission_ids = {p["id"] for p in permission_result.data}

        existing_result = supabase.table("role_permissions")\
            .select("permission_id")\
            .eq("role_id", role_id)\
            .execute()
        existing_permission_ids = {p["permission_id"] for p in existing_result.data or []}

        new_assignments = [
            {"role_id": role_id, "permission_id": pid}
            for pid in permission_ids - existing_permission_ids
        ]
        if new_assignments:
            supabase.table("role_permissions").insert(new_assignments).execute()
            logger.debug(f"Assigned {len(new_assignments)} permissions to role {role_name}")

        permissions_to_remove = existing_permission_ids - permission_ids
        if permissions_to_remove:
            supabase.table("role_permissions")\
                .delete()\
                .eq("role_id", role_id)\
                .in_("permission_id", list(permissions_to_remove))\
                .execute()
            logger.debug(f"Removed {len(permissions_to_remove)} permissions from role {role_name}")
    except Exception as e:
        logger.error(f"Error assigning permissions to role {role_name}: {e}")


def main():
    try:
        supabase = get_service_supabase()
        logger.info("Starting permissions and roles seeding...")

        # Roles reference permissions, so permissions go first
        perm_count = seed_permissions(supabase)
        role_count = seed_roles(supabase)

        logger.info(f"Seeding completed: {perm_count} permissions, {role_count} roles processed")
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
