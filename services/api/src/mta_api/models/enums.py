"""领域枚举定义。"""

from enum import StrEnum


class RecordStatus(StrEnum):
    """菜单、租户、角色、用户共用的启停状态。"""

    ENABLED = "enabled"  # 启用，参与展示与权限判断。
    DISABLED = "disabled"  # 禁用，终端用户不可见，管理端仍可配置。
