"""
Permissions and Roles Configuration
This config defines the permission catalogue (grouped by group_name), the
default permissions each role_type carries and the system roles.
Used by the seed script and by PermissionManager.has_permission.
"""

# Permission groups and their actions
PERMISSION_GROUPS = {
    "system": {
        "actions": ["definitions.manage", "sticky_messages.manage", "audit_logs.view", "settings.manage"],
        "description": "System settings and definitions"
    },
    "members": {
        "actions": ["members.view", "members.create", "members.update", "members.delete", "members.resign", "members.documents"],
        "description": "Member administration"
    },
    "finance": {
        "actions": ["finance.view", "finance.manage", "dues.view", "dues.manage"],
        "description": "Accounting and dues"
    },
    "content": {
        "actions": ["news.manage", "announcements.manage", "sliders.manage", "discounts.manage"],
        "description": "Published content"
    },
    "structure": {
        "actions": ["branches.manage", "categories.manage"],
        "description": "Branches and categories"
    },
    "legal": {
        "actions": ["legal.view", "legal.manage"],
        "description": "Legal requests"
    },
    "documents": {
        "actions": ["documents.view", "documents.manage", "decisions.manage", "templates.manage"],
        "description": "Official documents and board decisions"
    },
    "users": {
        "actions": ["users.view", "users.manage", "roles.manage"],
        "description": "Admin user management"
    },
}

# Only super_admin may see or assign permissions in these groups
SUPER_ADMIN_ONLY_GROUPS = {"users"}

# Descriptions for permissions whose generated text is not clear enough
PERMISSION_DESCRIPTIONS = {
    "members.resign": "Process member resignations",
    "members.documents": "Upload and remove member documents",
    "sticky_messages.manage": "Publish the site-wide sticky message",
    "templates.manage": "Manage official document templates",
}

# Permissions every admin of a role_type holds, on top of their RBAC role
ROLE_TYPE_DEFAULT_PERMISSIONS = {
    "general_manager": [
        "members.view", "members.create", "members.update",
        "members.resign", "members.documents",
        "dues.view", "finance.view",
        "documents.view", "legal.view",
    ],
    "regional_manager": ["members.view", "members.update", "members.documents", "dues.view", "dues.manage"],
    "branch_manager": ["members.view", "members.documents", "dues.view"],
}

ROLE_TYPES = ["general_manager", "regional_manager", "branch_manager"]

# System roles seeded on every installation
SYSTEM_ROLES = {
    "general_admin": {
        "role_type": "general_manager",
        "groups": ["system", "members", "finance", "content", "structure", "legal", "documents"],
        "description": "Head office administrator"
    },
    "regional_admin": {
        "role_type": "regional_manager",
        "groups": ["members"],
        "description": "Regional administrator"
    },
    "branch_admin": {
        "role_type": "branch_manager",
        "groups": ["members"],
        "description": "Branch administrator"
    },
}


def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the system roles
    Format: {
        "permissions": [
            {"key": "members.view", "name": "View members", "group_name": "members", "description": "..."},
            ...
        ],
        "roles": [
            {
                "name": "general_admin",
                "role_type": "general_manager",
                "description": "...",
                "permissions": ["announcements.manage", ...]
            },
            ...
        ]
    }
    """
    permissions = []
    roles = []

    for group_name, group_config in PERMISSION_GROUPS.items():
        for key in group_config["actions"]:
            resource, action = key.split(".", 1)
            name = f"{action.replace('_', ' ').capitalize()} {resource.replace('_', ' ')}"
            permissions.append({
                "key": key,
                "name": name,
                "group_name": group_name,
                "description": PERMISSION_DESCRIPTIONS.get(key, name)
            })

    for role_name, role_config in SYSTEM_ROLES.items():
        role_permissions = []
        for group_name in role_config["groups"]:
            role_permissions.extend(PERMISSION_GROUPS[group_name]["actions"])
        roles.append({
            "name": role_name,
            "role_type": role_config["role_type"],
            "description": role_config["description"],
            "permissions": sorted(role_permissions)
        })

    return {
        "permissions": permissions,
        "roles": roles
    }


def get_group_for_permission(key: str):
    for group_name, group_config in PERMISSION_GROUPS.items():
        if key in group_config["actions"]:
            return group_name
    return None


# Export the matrix for use in seed scripts
PERMISSION_MATRIX = get_permission_matrix()
