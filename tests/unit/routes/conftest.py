# tests/unit/routes/conftest.py
"""后台路由测试专用 fixtures.

提供内存 SQLite 上的测试应用、测试客户端与模板集合。
"""

import pytest
from jinja2 import DictLoader
from pydantic import Field

from adminflow import create_app, db
from adminflow.admin.resource import AdminResource
from adminflow.infra.audit import AuditManager, InMemoryAuditReader
from adminflow.infra.forms import PydanticFormBinder
from adminflow.infra.sqlalchemy_manager import SqlAlchemyDatagrid
from adminflow.schemas import PayloadSchema
from adminflow.settings import Settings

TEMPLATES = {
    "admin/layout.html": "{% block content %}{% endblock %}",
    "admin/ajax_layout.html": "{% block content %}{% endblock %}",
    "admin/list.html": (
        "{% extends base_template %}{% block content %}list|{{ csrf_token }}|"
        "{% for item in datagrid.get_results() %}{{ item.title }};{% endfor %}{% endblock %}"
    ),
    "admin/edit.html": (
        "{% extends base_template %}{% block content %}{{ action }}|"
        "{% for name in errors %}{{ name }};{% endfor %}{% endblock %}"
    ),
    "admin/show.html": "show|{% for name, value in elements %}{{ name }}={{ value }};{% endfor %}",
    "admin/delete.html": "delete|{{ csrf_token }}",
    "admin/batch_confirmation.html": "confirm|{{ csrf_token }}|{{ action_label }}",
    "admin/history.html": "history|{% for revision in revisions %}{{ revision.revision_id }};{% endfor %}",
}


class RouteArticle(db.Model):
    __tablename__ = "route_articles"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(100), nullable=False)
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __str__(self) -> str:
        return self.title


class RouteArticleForm(PayloadSchema):
    title: str = Field(min_length=1, max_length=100)


@pytest.fixture(scope="function")
def audit_reader():
    """进程内历史版本存储."""
    return InMemoryAuditReader()


@pytest.fixture(scope="function")
def app(audit_reader):
    """创建测试应用实例."""
    resource = AdminResource(
        name="article",
        model_class=RouteArticle,
        form_binder=PydanticFormBinder(RouteArticleForm),
        datagrid_factory=SqlAlchemyDatagrid.factory(db.session, filter_fields=("title",)),
        export_fields=("id", "title"),
        show_fields=("title",),
    )
    audit_manager = AuditManager()
    audit_manager.register(RouteArticle, audit_reader)

    app = create_app(settings=Settings.load(), resources=(resource,), audit_manager=audit_manager)
    app.config["TESTING"] = True
    app.jinja_loader = DictLoader(TEMPLATES)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    """创建测试客户端."""
    return app.test_client()


@pytest.fixture(scope="function")
def article_model():
    return RouteArticle


@pytest.fixture(scope="function")
def seeded(app):
    """预置两篇文章,返回它们的 id."""
    articles = [RouteArticle(title="First"), RouteArticle(title="Second")]
    db.session.add_all(articles)
    db.session.commit()
    return [article.id for article in articles]
