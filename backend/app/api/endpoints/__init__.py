# API endpoint routers
