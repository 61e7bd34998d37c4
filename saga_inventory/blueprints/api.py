"""JSON API blueprint: CRUD, CSV import/export and sale recording."""
from typing import Any, Dict, Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from saga_inventory.blueprints.metrics import record_import, sales_recorded_total
from saga_inventory.database import get_session
from saga_inventory.exceptions import ValidationError
from saga_inventory.services import sales_service
from saga_inventory.services.cache_service import invalidate
from saga_inventory.services.crud_service import get_service
from saga_inventory.services.csv_codec import export_csv
from saga_inventory.services.import_service import EXPORT_COLUMNS, get_import_spec, import_csv

api_bp = Blueprint('api', __name__, url_prefix='/api')

RESOURCES = 'any(suppliers, customers, sellers, products)'


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _uploaded_text() -> str:
    """CSV text from a multipart 'file' field or the raw request body."""
    upload = request.files.get('file')
    try:
        if upload is not None:
            return upload.read().decode('utf-8-sig')
        return request.get_data().decode('utf-8-sig')
    except UnicodeDecodeError:
        raise ValidationError('CSV file must be UTF-8 encoded')


def _csv_response(text: str, name: str) -> Response:
    return Response(
        text,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={name}.csv'}
    )


# =====================================================
# SALES
# =====================================================

@api_bp.route('/sales', methods=['GET'])
def list_sales():
    """List sales, newest first."""
    sales = sales_service.list_sales(get_session())
    return jsonify([sale.to_dict() for sale in sales])


@api_bp.route('/sales', methods=['POST'])
def record_sale() -> Tuple[Response, int]:
    """Record a sale atomically (sale + items + stock decrement)."""
    data = _json_body()
    sale = sales_service.record_sale(
        get_session(),
        customer_id=data.get('customer_id'),
        seller_id=data.get('seller_id'),
        items=data.get('items') or [],
        discount=data.get('discount', 0),
        discount_type=data.get('discount_type', 'percentage'),
        payment_method=data.get('payment_method'),
    )
    sales_recorded_total.inc()
    return jsonify(sale.to_dict(include_items=True)), 201


@api_bp.route('/sales/export', methods=['GET'])
def export_sales() -> Response:
    sales = sales_service.list_sales(get_session())
    text = export_csv([sale.to_dict() for sale in sales], EXPORT_COLUMNS['sales'])
    return _csv_response(text, 'sales')


@api_bp.route('/sales/<sale_id>', methods=['GET'])
def get_sale(sale_id: str):
    sale = sales_service.get_sale(get_session(), sale_id)
    return jsonify(sale.to_dict(include_items=True))


# =====================================================
# CSV IMPORT / EXPORT
# =====================================================

@api_bp.route(f'/<{RESOURCES}:resource>/import', methods=['POST'])
def import_resource(resource: str):
    """Import a CSV file row by row; the response carries the tally."""
    spec = get_import_spec(resource)
    service = get_service(resource, get_session())
    result = import_csv(
        _uploaded_text(),
        spec,
        service.create,
        error_preview=current_app.config.get('IMPORT_ERROR_PREVIEW', 3)
    )

    record_import(resource, result.imported, result.failed)
    current_app.logger.info(
        f"Import {resource}: imported={result.imported} failed={result.failed} aborted={result.aborted}"
    )

    if result.imported:
        invalidate(resource)
    status = 400 if result.aborted else 200
    return jsonify(result.to_dict()), status


@api_bp.route(f'/<{RESOURCES}:resource>/export', methods=['GET'])
def export_resource(resource: str) -> Response:
    service = get_service(resource, get_session())
    text = export_csv(service.list_dicts(), EXPORT_COLUMNS[resource])
    return _csv_response(text, resource)


# =====================================================
# CRUD
# =====================================================

@api_bp.route(f'/<{RESOURCES}:resource>', methods=['GET'])
def list_records(resource: str):
    search_query = request.args.get('q', '').strip()
    service = get_service(resource, get_session())
    return jsonify(service.list_dicts(search_query or None))


@api_bp.route(f'/<{RESOURCES}:resource>', methods=['POST'])
def create_record(resource: str):
    record = get_service(resource, get_session()).create(_json_body())
    return jsonify(record.to_dict()), 201


@api_bp.route(f'/<{RESOURCES}:resource>/<record_id>', methods=['GET'])
def get_record(resource: str, record_id: str):
    record = get_service(resource, get_session()).get(record_id)
    return jsonify(record.to_dict())


@api_bp.route(f'/<{RESOURCES}:resource>/<record_id>', methods=['PATCH'])
def update_record(resource: str, record_id: str):
    record = get_service(resource, get_session()).update(record_id, _json_body())
    return jsonify(record.to_dict())


@api_bp.route(f'/<{RESOURCES}:resource>/<record_id>', methods=['DELETE'])
def delete_record(resource: str, record_id: str):
    get_service(resource, get_session()).delete(record_id)
    return '', 204
