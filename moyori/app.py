from flask import Flask, request, jsonify, g
from flask_cors import CORS
from geopy.point import Point
import logging
import json
import datetime as _dt
from time import perf_counter

from moyori.config import Settings, load_settings
from moyori.equal_time import DEFAULT_WEIGHTS
from moyori.finder import MeetingPointFinder
from moyori.geo_math import InvalidInput
from moyori.geocoding import ReverseGeocoder
from moyori.routing_service import create_routing_service
from moyori.station_data import STATIONS
from moyori.station_directory import PREFECTURES, StationDirectory
from moyori.stations import MAX_STATIONS, Station
from moyori.travel_time import TravelTimeMatrixBuilder

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


# --- Request parsing helpers ---
def _parse_stations(data: dict) -> list:
    raw = data.get('stations')
    if not isinstance(raw, list):
        raise InvalidInput("stations must be a list")
    return [Station.from_dict(s) for s in raw]


def _parse_point(lat, lng) -> Point:
    """Validate a coordinate pair; geopy rejects latitudes outside [-90, 90]"""
    if lat is None or lng is None:
        raise InvalidInput("lat and lng are required")
    try:
        return Point(float(lat), float(lng))
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Invalid coordinate: {e}")


def _parse_departure_time(value):
    if not value:
        return None
    try:
        return _dt.datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidInput("departure_time must be an ISO 8601 timestamp")


def _parse_weights(value):
    if value is None:
        return None
    if not isinstance(value, dict) or not set(value) <= set(DEFAULT_WEIGHTS):
        raise InvalidInput(f"weights may only contain {sorted(DEFAULT_WEIGHTS)}")
    try:
        return {k: float(v) for k, v in value.items()}
    except (TypeError, ValueError):
        raise InvalidInput("weights must be numbers")


def _positive_number(data: dict, key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise InvalidInput(f"{key} must be a positive number")
    return value


def create_app(settings: Settings = None, routing_service=None, station_directory=None,
               reverse_geocoder=None, station_pool=None) -> Flask:
    """
    Build the Flask app. Collaborators default to the ones described by settings
    and can be injected (tests pass fakes).
    """
    settings = settings or load_settings()
    logging.getLogger().setLevel(settings.log_level)

    app = Flask(__name__)
    CORS(app)  # Enable CORS for all routes

    # Initialize services
    logger.info(f"Routing provider: {settings.routing_provider}, "
                f"API key found: {'Yes' if settings.routing_configured else 'No'}")
    if routing_service is None:
        try:
            routing_service = create_routing_service(settings)
        except ValueError as e:
            # googlemaps.Client rejects malformed keys at construction
            logger.error(f"Error initializing routing service: {e}")
            routing_service = create_routing_service(Settings(routing_provider=settings.routing_provider))
    if not routing_service.has_credentials:
        logger.warning("Routing API key not configured; every travel time will fail fast")

    matrix_builder = TravelTimeMatrixBuilder(
        routing_service,
        max_workers=settings.max_workers,
        delay_seconds=settings.request_delay_ms / 1000.0,
    )
    finder = MeetingPointFinder(matrix_builder, station_pool if station_pool is not None else STATIONS)
    directory = station_directory or StationDirectory()
    if reverse_geocoder is None:
        try:
            reverse_geocoder = ReverseGeocoder(settings.google_maps_api_key)
        except ValueError as e:
            logger.error(f"Error initializing reverse geocoder: {e}")
            reverse_geocoder = ReverseGeocoder(None)

    app.extensions['moyori'] = {
        'settings': settings,
        'finder': finder,
        'matrix_builder': matrix_builder,
    }

    # Per-request timing: record start time and log duration on completion
    @app.before_request
    def _start_timer():
        g._start_time = perf_counter()

    @app.after_request
    def _log_request_duration(response):
        start = getattr(g, '_start_time', None)
        if start is not None:
            duration_ms = (perf_counter() - start) * 1000.0
            response.headers['X-Process-Time-ms'] = f"{duration_ms:.1f}"
            logger.info(
                "request completed: method=%s path=%s status=%s duration_ms=%.1f remote_addr=%s",
                request.method,
                request.full_path if request.query_string else request.path,
                response.status_code,
                duration_ms,
                request.remote_addr,
            )
        return response

    @app.route('/', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            'message': 'Moyori meeting point API is running!',
            'endpoints': {
                'centroid': '/api/centroid',
                'equal_travel_time': '/api/equal-travel-time',
                'travel_time': '/api/travel-time',
                'prefectures': '/api/prefectures',
                'routes': '/api/routes',
                'stations': '/api/stations',
                'station_search': '/api/stations/search',
                'nearest_station': '/api/stations/nearest',
                'reverse_geocode': '/api/reverse-geocode',
                'config': '/api/config',
                'health': '/'
            },
            'status': 'healthy'
        })

    @app.route('/api/config', methods=['GET'])
    def get_config():
        return jsonify({
            'success': True,
            'data': {
                'routingProvider': settings.routing_provider,
                'routingConfigured': routing_service.has_credentials,
                'matrixPolicy': settings.matrix_policy,
                'maxStations': MAX_STATIONS,
                'maxCandidates': settings.max_candidates,
                'searchRadiusKm': settings.search_radius_km,
                'maxTravelTimeMinutes': settings.max_travel_time_minutes,
                'defaultWeights': DEFAULT_WEIGHTS,
            }
        })

    @app.route('/api/centroid', methods=['POST'])
    def find_centroid():
        """
        Meeting station nearest to the centroid of the selected stations
        Expected JSON: {"stations": [{"name": ..., "lat": ..., "lng": ...}, ...]}
        """
        logger.info("=== CENTROID REQUEST ===")
        try:
            data = request.get_json(silent=True)
            if not data:
                return jsonify({'error': 'JSON data is required'}), 400
            anchors = _parse_stations(data)
        except InvalidInput as e:
            logger.error(f"Invalid centroid request: {e}")
            return jsonify({'error': str(e)}), 400

        try:
            result = finder.find_centroid_meeting_point(anchors)
        except Exception as e:
            logger.error(f"Exception in find_centroid: {str(e)}", exc_info=True)
            return jsonify({'error': f'Server error: {str(e)}'}), 500

        if result['success']:
            meeting_point = result['data']['meeting_point']
            logger.info(f"Centroid meeting point: {meeting_point['name']}")
            return jsonify(result)
        logger.error(f"Centroid computation failed: {result['error']}")
        return jsonify(result), 400

    @app.route('/api/equal-travel-time', methods=['POST'])
    def find_equal_travel_time():
        """
        Meeting station reachable from every selected station in the most equal time
        Expected JSON: {
            "stations": [...],
            "max_distance_km": 5,            // optional
            "max_travel_time_minutes": 60,   // optional
            "departure_time": "2025-01-01T09:00:00",  // optional
            "weights": {"variance": 0.7, "average_time": 0.2, "fare": 0.1}  // optional
        }
        """
        logger.info("=== EQUAL TRAVEL TIME REQUEST ===")
        try:
            data = request.get_json(silent=True)
            if not data:
                return jsonify({'error': 'JSON data is required'}), 400
            logger.info(f"Request data received: {json.dumps(data, ensure_ascii=False)}")
            anchors = _parse_stations(data)
            max_distance_km = _positive_number(data, 'max_distance_km', settings.search_radius_km)
            max_travel_time = _positive_number(data, 'max_travel_time_minutes', settings.max_travel_time_minutes)
            departure_time = _parse_departure_time(data.get('departure_time'))
            weights = _parse_weights(data.get('weights'))
        except InvalidInput as e:
            logger.error(f"Invalid equal travel time request: {e}")
            return jsonify({'error': str(e)}), 400

        _algo_start = perf_counter()
        try:
            result = finder.find_equal_travel_time_meeting_point(
                anchors,
                max_distance_km=max_distance_km,
                max_travel_time_minutes=max_travel_time,
                departure_time=departure_time,
                weights=weights,
                candidate_limit=settings.max_candidates,
                policy=settings.matrix_policy,
            )
        except Exception as e:
            logger.error(f"Exception in find_equal_travel_time: {str(e)}", exc_info=True)
            return jsonify({'error': f'Server error: {str(e)}'}), 500
        _compute_ms = (perf_counter() - _algo_start) * 1000.0
        logger.info("Time to find equal travel time station = %.1f ms", _compute_ms)

        response = jsonify(result)
        response.headers['X-Compute-Time-ms'] = f"{_compute_ms:.1f}"
        if result['success']:
            return response
        logger.error(f"Equal travel time computation failed: {result['error']}")
        return response, 400

    @app.route('/api/travel-time', methods=['POST'])
    def get_travel_time():
        """
        Travel time between two stations
        Expected JSON: {"from": {...station...}, "to": {...station...}}
        """
        try:
            data = request.get_json(silent=True)
            if not data:
                return jsonify({'error': 'JSON data is required'}), 400
            if not data.get('from') or not data.get('to'):
                return jsonify({'error': 'Both from and to are required'}), 400
            from_station = Station.from_dict(data['from'])
            to_station = Station.from_dict(data['to'])
            departure_time = _parse_departure_time(data.get('departure_time'))
        except InvalidInput as e:
            return jsonify({'error': str(e)}), 400

        result = matrix_builder.calculate_travel_time(from_station, to_station, departure_time)
        if result.success:
            return jsonify({'success': True, 'data': result.to_dict()})
        return jsonify({'success': False, 'error': result.error, 'data': result.to_dict()}), 404

    @app.route('/api/prefectures', methods=['GET'])
    def get_prefectures():
        return jsonify({'success': True, 'data': PREFECTURES})

    @app.route('/api/routes', methods=['GET'])
    def get_routes():
        prefecture = request.args.get('prefecture')
        if not prefecture:
            return jsonify({'error': 'prefecture is required'}), 400
        return jsonify({'success': True, 'data': directory.get_routes(prefecture)})

    @app.route('/api/stations', methods=['GET'])
    def get_stations():
        line = request.args.get('line')
        if not line:
            return jsonify({'error': 'line is required'}), 400
        stations = directory.get_stations(line)
        return jsonify({'success': True, 'data': [s.to_dict() for s in stations]})

    @app.route('/api/stations/search', methods=['GET'])
    def search_stations():
        query = request.args.get('q', '')
        stations = directory.search_stations(query)
        return jsonify({'success': True, 'data': [s.to_dict() for s in stations]})

    @app.route('/api/stations/nearest', methods=['GET'])
    def nearest_station():
        try:
            point = _parse_point(request.args.get('lat'), request.args.get('lng'))
        except InvalidInput as e:
            return jsonify({'error': str(e)}), 400
        station = directory.get_nearest_station(point.latitude, point.longitude)
        if station is None:
            return jsonify({'success': False, 'error': 'No station found near the given point'}), 404
        return jsonify({'success': True, 'data': station.to_dict()})

    @app.route('/api/reverse-geocode', methods=['POST'])
    def reverse_geocode():
        """
        Address for a coordinate
        Expected JSON: {"lat": 35.68, "lng": 139.76}
        """
        data = request.get_json(silent=True) or {}
        try:
            point = _parse_point(data.get('lat'), data.get('lng'))
        except InvalidInput as e:
            return jsonify({'error': str(e)}), 400
        address = reverse_geocoder.reverse_geocode(point.latitude, point.longitude)
        if address is None:
            return jsonify({'success': False, 'error': 'Could not resolve an address for the given point'}), 404
        return jsonify({'success': True, 'data': address})

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Endpoint not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({'error': 'Internal server error'}), 500

    return app
