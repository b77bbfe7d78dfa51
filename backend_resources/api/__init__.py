"""HTTP layer: blueprints, guard decorators and error handlers."""
