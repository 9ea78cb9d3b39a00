"""
Core System Configuration - Hardcoded Setup
============================================

Defines the foundational navigation of the dashboard:
- 5 Core pages: Dashboard, Users, Roles, Pages, Activity
- 1 Admin role whose menu holds every core page

This data is used by the init_core_data command to populate the database.
No fixtures needed - this is the source of truth.
"""

# ============================================================================
# PAGES
# ============================================================================

class CorePages:
    """Core page routes."""
    DASHBOARD = '/dashboard'
    USERS = '/users'
    ROLES = '/roles'
    PAGES = '/pages'
    ACTIVITY = '/activity'


CORE_PAGES = [
    {'name': 'Dashboard', 'url': CorePages.DASHBOARD, 'icon': 'home'},
    {'name': 'Users', 'url': CorePages.USERS, 'icon': 'users'},
    {'name': 'Roles', 'url': CorePages.ROLES, 'icon': 'shield'},
    {'name': 'Pages', 'url': CorePages.PAGES, 'icon': 'file'},
    {'name': 'Activity', 'url': CorePages.ACTIVITY, 'icon': 'activity'},
]


# ============================================================================
# ROLES
# ============================================================================

class CoreRoles:
    """Core role names."""
    ADMIN = 'Admin'


# Menu of each core role: (page url, parent page url), in display order.
CORE_ROLES = [
    {
        'name': CoreRoles.ADMIN,
        'description': 'Administrator with access to every core page',
        'menu': [
            (CorePages.DASHBOARD, None),
            (CorePages.USERS, None),
            (CorePages.ROLES, CorePages.USERS),
            (CorePages.PAGES, CorePages.USERS),
            (CorePages.ACTIVITY, None),
        ],
    },
]
