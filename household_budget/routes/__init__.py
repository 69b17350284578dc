from . import auth, bills, system, users

BLUEPRINTS = (system.bp, auth.bp, users.bp, bills.bp)


def register_blueprints(app):
    for bp in BLUEPRINTS:
        app.register_blueprint(bp)
        app.logger.debug("Registered blueprint %s", bp.name)
