"""Static global-table policy.

``StaticTablePolicy`` implements the ``TablePolicy`` protocol from fixed
values, typically the ``[schema]`` section of ``db.toml``.

Usage:
    from schema_delta.adapters.policy import StaticTablePolicy

    policy = StaticTablePolicy({"wp_users", "wp_usermeta"}, upgrade_global_tables=False)
"""

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class StaticTablePolicy:
    """Global-table policy with a fixed table list and upgrade flag.

    Example:
        policy = StaticTablePolicy({"wp_users"})
        policy.should_upgrade_global_tables()
        # True
    """

    global_tables: set[str] = field(default_factory=set)
    upgrade_global_tables: bool = True

    @classmethod
    def from_names(cls, names: Iterable[str], upgrade_global_tables: bool = True) -> "StaticTablePolicy":
        """Build a policy from any iterable of table names."""
        return cls(global_tables=set(names), upgrade_global_tables=upgrade_global_tables)

    def list_global_tables(self) -> set[str]:
        return set(self.global_tables)

    def should_upgrade_global_tables(self) -> bool:
        return self.upgrade_global_tables
