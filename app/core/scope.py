"""
Row scope derived from an admin's role_type.

general_manager (and any super_admin) sees every row, regional_manager only
rows of its region, branch_manager only rows of its city. Scoped tables are
only ever read or written through ScopedTable so the narrowing is applied
before any query executes.
"""

from typing import Any, Dict, Optional

from supabase import Client

from app.core.exceptions import AuthorizationError, ScopeError
from app.core.permissions import PermissionManager, _field


class Scope:
    def __init__(self, column: Optional[str] = None, value: Any = None):
        self.column = column
        self.value = value

    @property
    def unrestricted(self) -> bool:
        return self.column is None

    def apply(self, query):
        """Narrow a Supabase query builder to the scope."""
        if self.unrestricted:
            return query
        return query.eq(self.column, self.value)

    def allows(self, row: Optional[Dict[str, Any]]) -> bool:
        if row is None:
            return False
        if self.unrestricted:
            return True
        return row.get(self.column) == self.value

    def stamp(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Fill the scope column on new rows; refuse rows outside the scope."""
        if self.unrestricted:
            return data
        current = data.get(self.column)
        if current is None:
            return {**data, self.column: self.value}
        if current != self.value:
            raise AuthorizationError(f"Cannot write rows outside your {self.column}")
        return data

    def as_filters(self) -> Dict[str, Any]:
        return {} if self.unrestricted else {self.column: self.value}

    def __eq__(self, other):
        return isinstance(other, Scope) and (self.column, self.value) == (other.column, other.value)

    def __repr__(self):
        return f"Scope({self.column!r}, {self.value!r})"


def resolve_scope(user: Any) -> Scope:
    """Return the row scope for an admin or raise ScopeError."""
    if user is None:
        raise ScopeError("No authenticated admin")
    if PermissionManager.is_super_admin(user):
        return Scope()
    role_type = _field(user, "role_type")
    if role_type == "general_manager":
        return Scope()
    if role_type == "regional_manager":
        region = _field(user, "region")
        if not region:
            raise ScopeError("Regional manager has no region assigned")
        return Scope("region", region)
    if role_type == "branch_manager":
        city = _field(user, "city")
        if not city:
            raise ScopeError("Branch manager has no city assigned")
        return Scope("city", city)
    raise ScopeError(f"No data scope for role type {role_type!r}")


class ScopedTable:
    """Data-access wrapper for a table whose rows carry city/region columns."""

    def __init__(self, supabase: Client, table: str, scope: Scope):
        self.supabase = supabase
        self.table = table
        self.scope = scope

    def select(self, columns: str = "*", count: Optional[str] = None):
        if count:
            query = self.supabase.table(self.table).select(columns, count=count)
        else:
            query = self.supabase.table(self.table).select(columns)
        return self.scope.apply(query)

    def get(self, row_id: str, columns: str = "*") -> Optional[Dict[str, Any]]:
        result = self.select(columns).eq("id", row_id).limit(1).execute()
        return result.data[0] if result.data else None

    def insert(self, data: Dict[str, Any]):
        return self.supabase.table(self.table).insert(self.scope.stamp(data)).execute()

    def update(self, row_id: str, data: Dict[str, Any], guard: Optional[Dict[str, Any]] = None):
        """Update one row inside the scope; ``guard`` adds equality preconditions."""
        if not self.scope.unrestricted and self.scope.column in data:
            self.scope.stamp(data)
        query = self.supabase.table(self.table).update(data).eq("id", row_id)
        for column, value in (guard or {}).items():
            query = query.eq(column, value)
        return self.scope.apply(query).execute()

    def delete(self, row_id: str):
        query = self.supabase.table(self.table).delete().eq("id", row_id)
        return self.scope.apply(query).execute()
