"""用户与身份模型。"""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portal_api.models.base import Base, IdMixin, TimestampMixin
from portal_api.models.enums import UserStatus


class User(Base, IdMixin, TimestampMixin):
    """门户用户。

    邮箱与用户名只在未删除用户范围内唯一，逻辑删除后即可被重新注册，
    因此唯一性由服务层校验而非数据库约束。
    """

    __tablename__ = "users"

    # 所属组织 ID（逻辑关联 organizations.id，不声明数据库外键）。
    organization_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    # 角色 ID。
    role_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    # 展示名。
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    # 登录用户名，仅字母数字。
    username: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    # 登录邮箱。
    email: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    # 口令哈希，不存明文，也不对外序列化。
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    # 工号。
    employee_id: Mapped[str | None] = mapped_column(String(64))
    # 职位。
    position: Mapped[str | None] = mapped_column(String(128))
    # 联系地址。
    address: Mapped[str | None] = mapped_column(Text)
    # 联系电话。
    phone: Mapped[str | None] = mapped_column(String(32))
    # 头像地址。
    thumbnail: Mapped[str | None] = mapped_column(String(512))
    # 个人简介。
    bio: Mapped[str | None] = mapped_column(Text)
    # 出生日期。
    birth_date: Mapped[date | None] = mapped_column(Date)
    # 用户状态（active/inactive/suspended/deleted）。
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=UserStatus.ACTIVE, index=True)
    # 最近一次登录时间，用于活跃度统计。
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
