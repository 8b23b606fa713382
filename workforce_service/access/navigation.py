"""Navigation tree of the HR portal with its role checks"""
from .gate import RouteNode, route
from .roles import RoleName

ADMINS = (RoleName.SUPER_ADMIN, RoleName.HR_ADMIN)
LEADERSHIP = (RoleName.SUPER_ADMIN, RoleName.HR_ADMIN, RoleName.MANAGER)


def build_navigation() -> RouteNode:
    return route("", children=[
        route("login", public=True),
        route("register", public=True),
        route("forgot-password", public=True),
        route("reset-password", public=True),
        route("verify-email", public=True),
        # Everything under /dashboard needs a signed-in user
        route("dashboard", children=[
            route("analytics"),
            route("employees", children=[
                route("add", roles=ADMINS),
                route(":id", children=[
                    route("edit", roles=ADMINS),
                ]),
            ]),
            route("departments"),
            route("task-assignment"),
            route("roles"),
            route("time-tracking"),
            route("attendance-monitor", roles=ADMINS),
            route("leave-request"),
            route("tasks"),
            route("payroll", roles=ADMINS),
            route("profile", children=[route(":tab")]),
            route("activities"),
            route("performance", roles=LEADERSHIP),
            route("schedule", roles=LEADERSHIP),
            route("compliance", roles=ADMINS),
            route("reports", roles=LEADERSHIP),
            route("settings", roles=ADMINS, children=[route(":tab")]),
            route("recruitment", roles=ADMINS),
            route("security", roles=(RoleName.SUPER_ADMIN,)),
        ]),
    ])


NAVIGATION = build_navigation()
