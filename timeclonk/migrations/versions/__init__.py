"""Ordered schema migration steps.

Each module holds one step: ``level`` and ``upgrade(conn)``. Steps are
history; never edit one that has shipped, add a new module instead.
"""

from timeclonk.migrations.versions import (
    v00_initial,
    v01_project_tables,
    v02_timeentry_ignore,
    v03_allocation,
    v04_project_rate,
    v05_orgauth_users,
    v06_member_roles,
    v07_orgauth_user_flags,
    v08_orgauth_token_regen,
    v09_orgauth_remote_users,
    v10_orgauth_token_index,
    v11_payentry_type,
    v12_project_invoicing,
    v13_drop_projecttemp,
)

STEP_MODULES = (
    v00_initial,
    v01_project_tables,
    v02_timeentry_ignore,
    v03_allocation,
    v04_project_rate,
    v05_orgauth_users,
    v06_member_roles,
    v07_orgauth_user_flags,
    v08_orgauth_token_regen,
    v09_orgauth_remote_users,
    v10_orgauth_token_index,
    v11_payentry_type,
    v12_project_invoicing,
    v13_drop_projecttemp,
)
