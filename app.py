# app.py

from flask import Flask, g, jsonify, request
from config import get_config
from extensions import db, migrate
import uuid
from werkzeug.middleware.proxy_fix import ProxyFix
from logging_config import setup_logging, get_logger

# Configure logging as early as possible
setup_logging(app_name="syndic-manager", log_level="INFO")
logger = get_logger(__name__)


def create_app(config_name=None, test_config=None):
    """Create and configure an instance of the Flask application."""
    app = Flask(__name__)

    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize app with config
    config_class.init_app(app)

    if test_config:
        app.config.update(test_config)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    db.init_app(app)
    migrate.init_app(app, db)

    # Initialize Enhanced Service Registry with Lazy Loading
    from services.service_registry_enhanced import create_enhanced_registry, ServiceLifecycle
    registry = create_enhanced_registry()

    # Base services (no dependencies)
    registry.register_factory(
        'db_session',
        lambda: _get_current_db_session(),
        lifecycle=ServiceLifecycle.TRANSIENT
    )

    registry.register_singleton(
        'property_cache',
        lambda: _create_property_cache(app.config)
    )

    registry.register_singleton(
        'import_guard',
        lambda: _create_single_flight('resident_import')
    )

    registry.register_singleton(
        'apartment_gap_guard',
        lambda: _create_single_flight('apartment_gap')
    )

    # Repositories
    registry.register_transient(
        'block_repository',
        lambda db_session: _create_block_repository(db_session),
        dependencies=['db_session']
    )

    registry.register_transient(
        'apartment_repository',
        lambda db_session: _create_apartment_repository(db_session),
        dependencies=['db_session']
    )

    registry.register_transient(
        'resident_repository',
        lambda db_session: _create_resident_repository(db_session),
        dependencies=['db_session']
    )

    registry.register_transient(
        'resident_import_repository',
        lambda db_session: _create_resident_import_repository(db_session),
        dependencies=['db_session']
    )

    registry.register_transient(
        'charge_repository',
        lambda db_session: _create_charge_repository(db_session),
        dependencies=['db_session']
    )

    registry.register_transient(
        'payment_repository',
        lambda db_session: _create_payment_repository(db_session),
        dependencies=['db_session']
    )

    # Services
    registry.register_transient(
        'block',
        lambda block_repository, apartment_repository, resident_repository, property_cache: _create_block_service(
            block_repository, apartment_repository, resident_repository, property_cache
        ),
        dependencies=['block_repository', 'apartment_repository', 'resident_repository', 'property_cache']
    )

    registry.register_transient(
        'apartment',
        lambda apartment_repository, block_repository, property_cache: _create_apartment_service(
            apartment_repository, block_repository, property_cache
        ),
        dependencies=['apartment_repository', 'block_repository', 'property_cache']
    )

    registry.register_transient(
        'resident',
        lambda resident_repository, block_repository, apartment_repository: _create_resident_service(
            resident_repository, block_repository, apartment_repository
        ),
        dependencies=['resident_repository', 'block_repository', 'apartment_repository']
    )

    registry.register_transient(
        'charge',
        lambda charge_repository: _create_charge_service(charge_repository),
        dependencies=['charge_repository']
    )

    registry.register_transient(
        'payment',
        lambda payment_repository, resident_repository: _create_payment_service(
            payment_repository, resident_repository
        ),
        dependencies=['payment_repository', 'resident_repository']
    )

    registry.register_transient(
        'dashboard',
        lambda block_repository, apartment_repository, resident_repository, payment_repository:
            _create_dashboard_service(
                block_repository, apartment_repository, resident_repository, payment_repository
            ),
        dependencies=['block_repository', 'apartment_repository', 'resident_repository',
                      'payment_repository']
    )

    # Import pipeline
    registry.register_transient(
        'import_gateway',
        lambda resident, block, apartment: _create_import_gateway(resident, block, apartment),
        dependencies=['resident', 'block', 'apartment']
    )

    registry.register_transient(
        'import_conflict',
        lambda import_gateway: _create_import_conflict_service(import_gateway, app.config),
        dependencies=['import_gateway']
    )

    registry.register_transient(
        'resident_import',
        lambda import_gateway, import_conflict, resident_import_repository, property_cache, import_guard:
            _create_resident_import_service(
                import_gateway, import_conflict, resident_import_repository,
                property_cache, import_guard, app.config
            ),
        dependencies=['import_gateway', 'import_conflict', 'resident_import_repository',
                      'property_cache', 'import_guard']
    )

    registry.register_transient(
        'apartment_gap',
        lambda import_gateway, apartment_gap_guard: _create_apartment_gap_service(
            import_gateway, apartment_gap_guard
        ),
        dependencies=['import_gateway', 'apartment_gap_guard']
    )

    errors = registry.validate_dependencies()
    if errors:
        for error in errors:
            logger.error("Service registry misconfigured", error=error)
        raise RuntimeError(f"Service registry has {len(errors)} dependency error(s)")

    # Attach registry to app
    app.services = registry

    # Add request tracking middleware
    @app.before_request
    def before_request():
        g.request_id = str(uuid.uuid4())
        logger.info("Request started",
                    request_id=g.request_id,
                    method=request.method,
                    path=request.path)

    @app.after_request
    def after_request(response):
        logger.info("Request completed",
                    request_id=getattr(g, 'request_id', None),
                    status_code=response.status_code)
        return response

    # Global error handlers
    @app.errorhandler(500)
    def internal_error(error):
        logger.error("Internal server error",
                     request_id=getattr(g, 'request_id', None),
                     error=str(error))
        return jsonify({'error': 'Internal server error'}), 500

    @app.errorhandler(404)
    def not_found_error(error):
        logger.warning("Page not found",
                       request_id=getattr(g, 'request_id', None),
                       path=request.path)
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(413)
    def payload_too_large(error):
        logger.warning("Upload rejected: payload too large",
                       request_id=getattr(g, 'request_id', None))
        return jsonify({'error': 'File is too large'}), 413

    @app.route('/health')
    def health_check():
        """Health check endpoint for monitoring"""
        from sqlalchemy import text
        from sqlalchemy.exc import SQLAlchemyError
        health_status = {
            'status': 'healthy',
            'service': 'syndic-manager'
        }

        try:
            db.session.execute(text('SELECT 1'))
            health_status['database'] = 'connected'
        except SQLAlchemyError as e:
            health_status['database'] = 'error'
            health_status['status'] = 'degraded'
            logger.error("Health check database error", error=str(e))

        return jsonify(health_status), 200 if health_status['status'] == 'healthy' else 503

    # Register blueprints for routes
    from routes.resident_routes import resident_bp
    from routes.block_routes import block_bp
    from routes.charge_routes import charge_bp
    from routes.payment_routes import payment_bp
    from routes.dashboard_routes import dashboard_bp

    app.register_blueprint(resident_bp, url_prefix='/residents')
    app.register_blueprint(block_bp, url_prefix='/blocks')
    app.register_blueprint(charge_bp, url_prefix='/charges')
    app.register_blueprint(payment_bp, url_prefix='/payments')
    app.register_blueprint(dashboard_bp, url_prefix='/dashboard')

    # Register CLI commands
    from scripts import commands
    commands.init_app(app)

    return app


# Service Factory Functions
# These are only called when the service is first requested

def _create_property_cache(app_config):
    """Create the shared PropertyCache"""
    from services.property_cache import PropertyCache
    return PropertyCache(default_ttl=app_config.get('PROPERTY_CACHE_TTL', 300))

def _create_single_flight(name):
    """Create a SingleFlight guard"""
    from services.common.single_flight import SingleFlight
    return SingleFlight(name)

def _create_block_service(block_repository, apartment_repository, resident_repository, property_cache):
    """Create BlockService instance with repositories"""
    from services.block_service import BlockService
    return BlockService(
        block_repository=block_repository,
        apartment_repository=apartment_repository,
        resident_repository=resident_repository,
        property_cache=property_cache
    )

def _create_apartment_service(apartment_repository, block_repository, property_cache):
    """Create ApartmentService instance with repositories"""
    from services.apartment_service import ApartmentService
    return ApartmentService(
        apartment_repository=apartment_repository,
        block_repository=block_repository,
        property_cache=property_cache
    )

def _create_resident_service(resident_repository, block_repository, apartment_repository):
    """Create ResidentService instance with repositories"""
    from services.resident_service import ResidentService
    return ResidentService(
        resident_repository=resident_repository,
        block_repository=block_repository,
        apartment_repository=apartment_repository
    )

def _create_charge_service(charge_repository):
    """Create ChargeService instance with repository dependency"""
    from services.charge_service import ChargeService
    return ChargeService(charge_repository=charge_repository)

def _create_payment_service(payment_repository, resident_repository):
    """Create PaymentService instance with repositories"""
    from services.payment_service import PaymentService
    return PaymentService(
        payment_repository=payment_repository,
        resident_repository=resident_repository
    )

def _create_dashboard_service(block_repository, apartment_repository, resident_repository, payment_repository):
    """Create DashboardService instance with repositories"""
    from services.dashboard_service import DashboardService
    return DashboardService(
        block_repository=block_repository,
        apartment_repository=apartment_repository,
        resident_repository=resident_repository,
        payment_repository=payment_repository
    )

def _create_import_gateway(resident, block, apartment):
    """Create the async persistence gateway used by the import pipeline"""
    from services.resident_import_gateway import ResidentImportGateway
    return ResidentImportGateway(
        resident_service=resident,
        block_service=block,
        apartment_service=apartment
    )

def _create_import_conflict_service(import_gateway, app_config):
    """Create ImportConflictService with retry and timeout settings"""
    from services.import_conflict_service import ImportConflictService
    return ImportConflictService(
        gateway=import_gateway,
        max_retries=app_config.get('IMPORT_MAX_RETRIES', 3),
        base_delay=app_config.get('IMPORT_RETRY_BASE_DELAY', 1.0),
        timeout=app_config.get('CONFLICT_CHECK_TIMEOUT', 15.0)
    )

def _create_resident_import_service(import_gateway, import_conflict, resident_import_repository,
                                    property_cache, import_guard, app_config):
    """Create ResidentImportService with pipeline dependencies"""
    from services.resident_import_service import ResidentImportService
    logger.info("Initializing ResidentImportService")
    return ResidentImportService(
        gateway=import_gateway,
        conflict_service=import_conflict,
        import_repository=resident_import_repository,
        property_cache=property_cache,
        import_guard=import_guard,
        chunk_size=app_config.get('IMPORT_CHUNK_SIZE', 3),
        throttle_seconds=app_config.get('IMPORT_THROTTLE_SECONDS', 0.5),
        max_retries=app_config.get('IMPORT_MAX_RETRIES', 3),
        retry_base_delay=app_config.get('IMPORT_RETRY_BASE_DELAY', 1.0),
        max_file_size=app_config.get('IMPORT_MAX_FILE_SIZE', 5 * 1024 * 1024),
        allowed_extensions=app_config.get('IMPORT_ALLOWED_EXTENSIONS', ('.csv', '.tsv'))
    )

def _create_apartment_gap_service(import_gateway, apartment_gap_guard):
    """Create ApartmentGapService"""
    from services.apartment_gap_service import ApartmentGapService
    return ApartmentGapService(gateway=import_gateway, guard=apartment_gap_guard)

# Repository creation functions
def _create_block_repository(db_session):
    """Create BlockRepository instance"""
    from repositories.block_repository import BlockRepository
    return BlockRepository(session=db_session)

def _create_apartment_repository(db_session):
    """Create ApartmentRepository instance"""
    from repositories.apartment_repository import ApartmentRepository
    return ApartmentRepository(session=db_session)

def _create_resident_repository(db_session):
    """Create ResidentRepository instance"""
    from repositories.resident_repository import ResidentRepository
    return ResidentRepository(session=db_session)

def _create_resident_import_repository(db_session):
    """Create ResidentImportRepository instance"""
    from repositories.resident_import_repository import ResidentImportRepository
    return ResidentImportRepository(session=db_session)

def _create_charge_repository(db_session):
    """Create ChargeRepository instance"""
    from repositories.charge_repository import ChargeRepository
    return ChargeRepository(session=db_session)

def _create_payment_repository(db_session):
    """Create PaymentRepository instance"""
    from repositories.payment_repository import PaymentRepository
    return PaymentRepository(session=db_session)


def _get_current_db_session():
    """Get the current database session.

    Always resolved at call time so tests that replace the session
    pick up the active one.
    """
    return db.session


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True)
