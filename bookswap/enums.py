"""服务端与客户端共用的枚举"""

from enum import Enum


class BookCondition(str, Enum):
    NEW = "New"
    LIKE_NEW = "Like New"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class RequestStatus(str, Enum):
    """换书请求状态。取消 = 删除记录，不是一个状态"""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
