"""Default capability catalogue.

Defines the capabilities a network admin can hand to a support agent:
the built-in WordPress network/site capabilities plus the WP Ultimo
platform capabilities, grouped the way the edit screen lists them.
"""

from __future__ import annotations

from .capabilities import WORDPRESS_GROUP, Capability, CapabilityRegistry

# =========================================================================
# Built-in WordPress capabilities
# =========================================================================
WORDPRESS_CAPABILITIES: list[Capability] = [
    # Network administration
    Capability("manage_network", "Manage Network", "Access the network admin dashboard."),
    Capability("manage_sites", "Manage Sites", "Edit, archive and deactivate sites."),
    Capability("create_sites", "Create Sites", "Create new sites on the network."),
    Capability("delete_sites", "Delete Sites", "Delete sites from the network."),
    Capability("manage_network_users", "Manage Network Users", "Edit users across the network."),
    Capability("manage_network_plugins", "Manage Network Plugins", "Network-activate plugins."),
    Capability("manage_network_themes", "Manage Network Themes", "Network-enable themes."),
    Capability("manage_network_options", "Manage Network Options", "Edit network settings."),
    Capability("upgrade_network", "Upgrade Network", "Run network database upgrades."),
    # Users
    Capability("list_users", "List Users", "View the users list."),
    Capability("create_users", "Create Users", "Add new users."),
    Capability("edit_users", "Edit Users", "Edit user profiles."),
    Capability("promote_users", "Promote Users", "Change user roles."),
    Capability("delete_users", "Delete Users", "Delete users."),
    # Site administration
    Capability("manage_options", "Manage Options", "Edit site settings."),
    Capability("activate_plugins", "Activate Plugins", "Activate and deactivate plugins."),
    Capability("install_plugins", "Install Plugins", "Install new plugins."),
    Capability("edit_theme_options", "Edit Theme Options", "Customize themes, menus and widgets."),
    Capability("export", "Export", "Export site content."),
    Capability("import", "Import", "Import site content."),
]

# =========================================================================
# WP Ultimo platform capabilities
# =========================================================================
PLATFORM_CAPABILITY_GROUPS: dict[str, list[Capability]] = {
    "wp-ultimo-support-agents": [
        Capability("wu_read_support_agents", "View Support Agents", "See the support agents list."),
        Capability("wu_add_support_agents", "Add Support Agents", "Create new support agents."),
        Capability("wu_edit_support_agents", "Edit Support Agents", "Change agent capabilities."),
        Capability("wu_delete_support_agents", "Delete Support Agents", "Remove support agents."),
    ],
    "wp-ultimo-customers": [
        Capability("wu_read_customers", "View Customers", "See customers and their details."),
        Capability("wu_edit_customers", "Edit Customers", "Edit customer data."),
        Capability("wu_delete_customers", "Delete Customers", "Delete customers."),
    ],
    "wp-ultimo-memberships": [
        Capability("wu_read_memberships", "View Memberships", "See memberships."),
        Capability("wu_edit_memberships", "Edit Memberships", "Change plans and status."),
    ],
    "wp-ultimo-payments": [
        Capability("wu_read_payments", "View Payments", "See payments and invoices."),
        Capability("wu_edit_payments", "Edit Payments", "Refund and edit payments."),
    ],
    "wp-ultimo-sites": [
        Capability("wu_read_sites", "View Sites", "See sites managed by WP Ultimo."),
        Capability("wu_edit_sites", "Edit Sites", "Edit site details and templates."),
    ],
    "wp-ultimo-settings": [
        Capability("wu_read_settings", "View Settings", "See WP Ultimo settings."),
        Capability("wu_edit_settings", "Edit Settings", "Change WP Ultimo settings."),
    ],
}


def register_default_capabilities(registry: CapabilityRegistry) -> CapabilityRegistry:
    """Register the built-in and platform groups on a registry.

    Built-in capabilities are registered first so listings show them ahead
    of platform ones.

    Args:
        registry: Registry to fill (must not be frozen)

    Returns:
        The same registry, for chaining
    """
    registry.register_group(WORDPRESS_GROUP, WORDPRESS_CAPABILITIES)
    for group, capabilities in PLATFORM_CAPABILITY_GROUPS.items():
        registry.register_group(group, capabilities)
    return registry


def build_default_registry() -> CapabilityRegistry:
    """Create a frozen registry holding the default catalogue."""
    registry = register_default_capabilities(CapabilityRegistry())
    registry.freeze()
    return registry
