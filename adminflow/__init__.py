"""adminflow - Flask 应用初始化.

基于 Flask 的通用后台 CRUD 动作编排.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from flask import Flask
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy
from werkzeug.exceptions import HTTPException

from adminflow.admin.collaborators import AdminCollaborators
from adminflow.errors import AppError
from adminflow.infra.csrf import FlaskWtfCsrfTokenManager
from adminflow.infra.exporter import TabularExporter
from adminflow.infra.feedback import FlashFeedback
from adminflow.infra.sqlalchemy_manager import SqlAlchemyModelManager
from adminflow.infra.translator import YamlCatalogTranslator
from adminflow.routes.admin_views import create_admin_blueprint
from adminflow.settings import Settings
from adminflow.utils.response_utils import jsonify_unified_error
from adminflow.utils.structlog_config import configure_structlog, get_system_logger

if TYPE_CHECKING:
    from flask.typing import ResponseReturnValue

    from adminflow.admin.collaborators import AclManipulator, AuditManager, Exporter, ModelManager
    from adminflow.admin.resource import AdminResource

# 初始化扩展
db = SQLAlchemy()
login_manager = LoginManager()


def create_app(
    *,
    settings: Settings | None = None,
    resources: Sequence[AdminResource] = (),
    model_manager: ModelManager | None = None,
    audit_manager: AuditManager | None = None,
    exporter: Exporter | None = None,
    acl: AclManipulator | None = None,
    user_loader: Callable[[str], object | None] | None = None,
) -> Flask:
    """创建 Flask 应用实例.

    Args:
        settings: 可选的配置对象,用于测试或多环境启动.
        resources: 需要注册后台路由的资源.
        model_manager: 持久化协作方,默认使用 `db.session` 的 SQLAlchemy 适配器.
        audit_manager: 审计管理器,为 None 时历史相关动作返回 404.
        exporter: 导出器,默认支持 csv/json.
        acl: ACL 读写器.
        user_loader: Flask-Login 的用户加载函数.

    Returns:
        Flask: Flask 应用实例.

    """
    resolved_settings = settings or Settings.load()
    app = Flask(__name__)

    # 配置应用
    configure_app(app, resolved_settings)

    # 初始化扩展
    initialize_extensions(app, user_loader)

    # 配置统一日志系统
    configure_structlog(app)
    logging.getLogger().setLevel(getattr(logging, resolved_settings.log_level, logging.INFO))

    collaborators = AdminCollaborators(
        model_manager=model_manager or SqlAlchemyModelManager(db.session),
        translator=YamlCatalogTranslator(resolved_settings.translation_locale),
        feedback=FlashFeedback(),
        csrf=FlaskWtfCsrfTokenManager(),
        audit_manager=audit_manager,
        exporter=exporter or TabularExporter(),
        acl=acl,
        debug=resolved_settings.debug,
    )
    app.extensions["adminflow.collaborators"] = collaborators

    # 注册蓝图
    configure_blueprints(app, resources, collaborators, resolved_settings)

    # 注册错误处理器
    configure_error_handlers(app, debug=resolved_settings.debug)

    return app


def configure_app(app: Flask, settings: Settings) -> None:
    """写入 Settings 提供的配置."""
    app.config.from_mapping(settings.to_flask_config())
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_NAME"] = "adminflow_session"


def initialize_extensions(app: Flask, user_loader: Callable[[str], object | None] | None) -> None:
    """初始化数据库与登录管理扩展."""
    db.init_app(app)

    login_manager.init_app(app)
    login_manager.session_protection = "basic"

    @login_manager.user_loader
    def load_user(user_id: str) -> object | None:
        if user_loader is None:
            return None
        return user_loader(user_id)


def configure_blueprints(
    app: Flask,
    resources: Sequence[AdminResource],
    collaborators: AdminCollaborators,
    settings: Settings,
) -> None:
    """为每个资源注册蓝图,挂载在 `ADMIN_URL_PREFIX/<资源名>` 下."""
    logger = get_system_logger()
    for resource in resources:
        blueprint = create_admin_blueprint(resource, collaborators)
        app.register_blueprint(blueprint, url_prefix=f"{settings.admin_url_prefix}/{resource.name}")
        logger.info("已注册后台资源", resource=resource.name, routes=sorted(resource.routes))


def configure_error_handlers(app: Flask, *, debug: bool) -> None:
    """注册统一错误处理器.

    调试模式下不接管未知异常,交给框架的调试页.
    """

    @app.errorhandler(AppError)
    @app.errorhandler(HTTPException)
    def handle_known_error(error: Exception) -> ResponseReturnValue:
        return jsonify_unified_error(error)

    if debug:
        return

    @app.errorhandler(Exception)
    def handle_global_exception(error: Exception) -> ResponseReturnValue:
        get_system_logger().error("未处理的异常", error_type=error.__class__.__name__, exception=str(error))
        return jsonify_unified_error(error)
