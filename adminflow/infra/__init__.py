"""后台协作方的默认实现(Flask、SQLAlchemy、YAML)."""
