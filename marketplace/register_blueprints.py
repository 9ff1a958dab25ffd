"""
Centralized Blueprint Registration
All blueprints MUST be registered inside register_all_blueprints(app)
"""

def register_all_blueprints(app):

    # Root
    from marketplace.routes.root.root_routes import root_bp
    app.register_blueprint(root_bp)

    # Storefront
    from marketplace.routes.shop.shop_routes import shop_bp
    from marketplace.routes.blog.blog_routes import blog_bp
    from marketplace.routes.contact.contact_routes import contact_bp
    app.register_blueprint(shop_bp)
    app.register_blueprint(blog_bp)
    app.register_blueprint(contact_bp)

    # Farm owners
    from marketplace.routes.owner.owner_routes import owner_bp
    app.register_blueprint(owner_bp)

    # Admin modules
    from marketplace.routes.admin.dashboard_routes import admin_dashboard_bp
    from marketplace.routes.admin.catalog_routes import admin_catalog_bp
    from marketplace.routes.admin.order_routes import admin_orders_bp
    from marketplace.routes.admin.farm_routes import admin_farms_bp
    from marketplace.routes.admin.promo_routes import admin_promos_bp
    from marketplace.routes.admin.blog_routes import admin_blog_bp
    from marketplace.routes.admin.message_routes import admin_messages_bp

    app.register_blueprint(admin_dashboard_bp)
    app.register_blueprint(admin_catalog_bp)
    app.register_blueprint(admin_orders_bp)
    app.register_blueprint(admin_farms_bp)
    app.register_blueprint(admin_promos_bp)
    app.register_blueprint(admin_blog_bp)
    app.register_blueprint(admin_messages_bp)

    print("✓ All blueprints registered")
