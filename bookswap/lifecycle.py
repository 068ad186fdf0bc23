"""
换书请求状态机

pending ──accept (owner)──→ accepted
        ──decline (owner)─→ declined
        ──cancel (requester)→ 记录删除

accepted / declined 为终态，不允许再次打开。
服务端据此裁决，客户端据此做本地预检和按钮展示。
"""

from enum import Enum

from bookswap.enums import RequestStatus


class Role(str, Enum):
    OWNER = "owner"
    REQUESTER = "requester"
    OTHER = "other"


class RequestAction(str, Enum):
    ACCEPT = "accept"
    DECLINE = "decline"
    CANCEL = "cancel"


class LifecycleError(Exception):
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ActionNotPermitted(LifecycleError):
    """当前角色无权执行该操作"""


class InvalidTransition(LifecycleError):
    """当前状态下不允许该操作"""


TERMINAL_STATUSES: frozenset[RequestStatus] = frozenset({
    RequestStatus.ACCEPTED,
    RequestStatus.DECLINED,
})

# 动作 → 目标状态；None 表示记录被删除
ACTION_TARGETS: dict[RequestAction, RequestStatus | None] = {
    RequestAction.ACCEPT: RequestStatus.ACCEPTED,
    RequestAction.DECLINE: RequestStatus.DECLINED,
    RequestAction.CANCEL: None,
}

ROLE_ACTIONS: dict[Role, frozenset[RequestAction]] = {
    Role.OWNER: frozenset({RequestAction.ACCEPT, RequestAction.DECLINE}),
    Role.REQUESTER: frozenset({RequestAction.CANCEL}),
    Role.OTHER: frozenset(),
}


def role_of(actor_id: str, owner_id: str, requester_id: str) -> Role:
    if actor_id == owner_id:
        return Role.OWNER
    if actor_id == requester_id:
        return Role.REQUESTER
    return Role.OTHER


def is_terminal(status: RequestStatus) -> bool:
    return RequestStatus(status) in TERMINAL_STATUSES


def check_transition(
    status: RequestStatus, action: RequestAction, role: Role
) -> RequestStatus | None:
    """
    校验一次状态迁移，返回目标状态（cancel 返回 None）。
    先校验角色权限，再校验当前状态。
    """
    action = RequestAction(action)
    status = RequestStatus(status)
    if action not in ROLE_ACTIONS[Role(role)]:
        raise ActionNotPermitted(f"A {Role(role).value} may not {action.value} this request")
    if status != RequestStatus.PENDING:
        raise InvalidTransition(f"Cannot {action.value} a request that is already {status.value}")
    return ACTION_TARGETS[action]


def allowed_actions(status: RequestStatus, role: Role) -> frozenset[RequestAction]:
    if RequestStatus(status) != RequestStatus.PENDING:
        return frozenset()
    return ROLE_ACTIONS[Role(role)]
