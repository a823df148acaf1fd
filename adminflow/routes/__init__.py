"""后台资源的 Flask 路由."""
