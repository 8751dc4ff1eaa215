import logging

from flask import Blueprint, jsonify, request
from sqlalchemy import text

from . import alerts, levels, reporting, store
from .errors import NotFoundError, ValidationError
from .models import AlertStatus, db, utcnow

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')


def _ok(data, **extra):
    body = {'success': True}
    if isinstance(data, list):
        body['count'] = len(data)
    body['data'] = data
    body.update(extra)
    return jsonify(body)


def _json_body():
    data = request.get_json(silent=True)
    if not data:
        raise ValidationError('No data provided')
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _required(data, *fields):
    missing = [f for f in fields if data.get(f) is None or str(data.get(f)).strip() == '']
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def _as_id(value, field):
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer id')
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer id')


# --- Bins ---

@api.route('/bins', methods=['GET'])
def get_bins():
    bins = store.list_bins(db.session)
    return _ok([b.to_dict() for b in bins])


@api.route('/bins/<int:bin_id>', methods=['GET'])
def get_bin(bin_id):
    bin = store.get_bin(db.session, bin_id)
    if bin is None:
        raise NotFoundError('Bin not found')
    return _ok(bin.to_dict())


# --- Alerts ---

@api.route('/alerts', methods=['GET'])
def get_alerts():
    status = request.args.get('status')
    if status:
        try:
            status = AlertStatus(status)
        except ValueError:
            raise ValidationError('status must be Pending or Resolved')
    else:
        status = None

    min_level = request.args.get('min_level')
    if min_level:
        try:
            min_level = int(min_level)
        except ValueError:
            raise ValidationError('min_level must be an integer')
    else:
        min_level = None

    rows = store.list_alerts(db.session, status=status, min_level=min_level)
    return _ok([a.to_dict() for a in rows])


@api.route('/alerts', methods=['POST'])
def create_alert():
    data = _json_body()
    _required(data, 'bin_id', 'alert_type')
    bin_id = _as_id(data['bin_id'], 'bin_id')

    alert = alerts.raise_alert(db.session, bin_id, data['alert_type'])
    if alert is None:
        return _ok(None, created=False, message='A pending alert of this type already exists')
    return _ok(alert.to_dict(), created=True), 201


@api.route('/alerts/<int:alert_id>', methods=['PUT'])
def resolve_alert(alert_id):
    alert_id, bin_id = alerts.resolve(db.session, alert_id)
    return _ok({'alert_id': alert_id, 'bin_id': bin_id}, message='Alert resolved and bin emptied')


# --- Waste collection ---

@api.route('/waste', methods=['POST'])
def add_waste_record():
    data = _json_body()
    _required(data, 'bin_id', 'collected_by', 'waste_weight')
    bin_id = _as_id(data['bin_id'], 'bin_id')
    staff_id = _as_id(data['collected_by'], 'collected_by')

    result = levels.record_collection(db.session, bin_id, staff_id, data['waste_weight'])
    return _ok(result.to_dict(), message='Waste collection record added'), 201


@api.route('/collections', methods=['GET'])
def get_collections():
    bin_id = request.args.get('bin_id')
    bin_id = _as_id(bin_id, 'bin_id') if bin_id else None
    rows = store.list_collections(db.session, bin_id=bin_id)
    return _ok([c.to_dict() for c in rows])


# --- Reference data ---

@api.route('/locations', methods=['GET'])
def get_locations():
    rows = store.list_locations(db.session)
    data = []
    for location, bin_count in rows:
        item = location.to_dict()
        item['bin_count'] = bin_count
        data.append(item)
    return _ok(data)


@api.route('/staff', methods=['GET'])
def get_staff():
    return _ok([s.to_dict() for s in store.list_staff(db.session)])


# --- Dashboard ---

@api.route('/dashboard/stats', methods=['GET'])
def get_dashboard_stats():
    return _ok(reporting.dashboard_stats(db.session))


# Health check endpoint
@api.route('/health', methods=['GET'])
def health_check():
    try:
        db.session.execute(text('SELECT 1'))
        stats = reporting.dashboard_stats(db.session)
        return jsonify({
            'success': True,
            'status': 'healthy',
            'database': 'connected',
            'bin_count': stats['bins']['total_bins'],
            'alert_count': stats['alerts']['total_alerts'],
            'timestamp': utcnow().isoformat(),
        })
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        db.session.rollback()
        return jsonify({'success': False, 'status': 'unhealthy', 'error': str(e)}), 500
