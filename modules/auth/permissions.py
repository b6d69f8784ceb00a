"""
Auth Module - Roles & Permissions Registry
============================================
Roles and the default permission set each role carries.
Authentication itself lives outside this service; callers hand us an Actor.

Roles:
  manager    → everything
  accountant → financial views, receives cashier cash, withdrawals
  cashier    → POS sales, customer assignment, own sales
"""

from dataclasses import dataclass


ROLE_MANAGER = "manager"
ROLE_ACCOUNTANT = "accountant"
ROLE_CASHIER = "cashier"

ALL_ROLES = [ROLE_MANAGER, ROLE_ACCOUNTANT, ROLE_CASHIER]

PERMISSION_REGISTRY = {
    "accessPos":               "Access POS",
    "createSales":             "Create sales",
    "applyDiscounts":          "Apply discounts",
    "assignCustomer":          "Assign customer to sale",
    "viewOwnSales":            "View own sales",
    "viewAllSales":            "View all sales",
    "viewFinancialDashboards": "View financial dashboards",
    "viewReports":             "View reports",
    "viewCustomerBalances":    "View customer balances",
    "receiveCashierCash":      "Receive cashier cash",
    "withdrawMoney":           "Withdraw money",
    "viewCustomerList":        "View customer list",
    "createCustomers":         "Create customers",
    "editCustomers":           "Edit customers",
    "accessSettings":          "Access settings",
}

ALL_PERMISSION_KEYS = list(PERMISSION_REGISTRY.keys())

DEFAULT_PERMISSIONS = {
    ROLE_MANAGER: set(ALL_PERMISSION_KEYS),
    ROLE_ACCOUNTANT: {
        "viewFinancialDashboards", "viewReports", "viewCustomerBalances",
        "receiveCashierCash", "withdrawMoney", "viewCustomerList",
    },
    ROLE_CASHIER: {
        "accessPos", "createSales", "assignCustomer", "viewOwnSales",
        "viewCustomerList", "createCustomers",
    },
}


@dataclass(frozen=True)
class Actor:
    """Authenticated identity handed in by the auth/session collaborator."""
    id: int
    name: str
    role: str = ROLE_CASHIER

    def has_permission(self, key: str) -> bool:
        return key in DEFAULT_PERMISSIONS.get(self.role, set())
