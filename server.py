from flask import Flask, request
from flask_restful import abort, Api, Resource
from config import (
    FLASK_HOST, FLASK_PORT, DEBUG, LEDGER_PATH, CORS_ALLOW, LOG_LEVEL
)

from api_change_ledger.exceptions import LedgerStoreError
from api_change_ledger.models import FilterState
from api_change_ledger.processing import filters
from api_change_ledger.processing.query_state import decode, encode, to_query_string
from api_change_ledger.processing.store import JsonLedgerStore

import logging

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["LEDGER_PATH"] = LEDGER_PATH
api = Api(app)
app_name = 'api-change-ledger'


# Add headers to all responses
@app.after_request
def add_headers(response):
    # Add common security headers
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-XSS-Protection'] = '1; mode=block'
    # Add CORS headers
    response.headers['Access-Control-Allow-Origin'] = CORS_ALLOW
    response.headers['X-Application-Name'] = app_name
    return response


def load_ledger():
    store = JsonLedgerStore(app.config["LEDGER_PATH"])
    try:
        return store.read()
    except LedgerStoreError as e:
        abort(503, message=str(e))


def state_payload(state: FilterState) -> dict:
    return {"filters": encode(state), "query": to_query_string(state)}


class ChangesResource(Resource):
    def get(self):
        ledger = load_ledger()
        state = filters.reconcile(decode(request.args), ledger)
        rows = filters.filter_records(ledger, state)
        logger.info(f"GET {request.full_path} -> {len(rows)} of {len(ledger)}")

        response = state_payload(state)
        response.update({
            "total": len(ledger),
            "count": len(rows),
            "available_routes": filters.available_routes(ledger, state.providers),
            "changes": [record.model_dump(exclude_none=True) for record in rows],
        })
        return response


class ProvidersResource(Resource):
    def get(self):
        return filters.list_providers(load_ledger())


class RoutesResource(Resource):
    def get(self):
        state = decode(request.args)
        return filters.available_routes(load_ledger(), state.providers)


class FiltersResource(Resource):
    """Apply one filter interaction and return the resulting state."""

    ACTIONS = ("select_provider", "deselect_provider", "add_route", "remove_route", "set", "clear")

    def post(self):
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            abort(400, message="Request body must be a JSON object")
        params = body.get("params") or {}
        action = body.get("action")
        value = body.get("value")
        if not isinstance(params, dict):
            abort(400, message="'params' must be an object of strings")
        if value is not None and not isinstance(value, str):
            abort(400, message="'value' must be a string")
        if action not in self.ACTIONS:
            abort(400, message=f"'action' must be one of {', '.join(self.ACTIONS)}")

        state = decode({k: v for k, v in params.items() if isinstance(v, str)})

        if action == "clear":
            return state_payload(filters.clear_filters())

        if action == "set":
            name = body.get("name")
            if name not in filters.SCALAR_FILTERS:
                abort(400, message=f"'name' must be one of {', '.join(filters.SCALAR_FILTERS)}")
            return state_payload(filters.set_filter(state, name, value))

        if not value:
            abort(400, message="'value' is required")

        if action == "remove_route":
            return state_payload(filters.remove_route(state, value))

        ledger = load_ledger()
        state = filters.reconcile(state, ledger)
        if action == "add_route":
            state = filters.add_route(state, ledger, value)
        elif action == "select_provider":
            state = filters.select_provider(state, ledger, value)
        else:
            state = filters.deselect_provider(state, ledger, value)
        return state_payload(state)


class SummaryResource(Resource):
    def get(self):
        return filters.summarize(load_ledger())


api.add_resource(ChangesResource, '/api/changes')
api.add_resource(ProvidersResource, '/api/providers')
api.add_resource(RoutesResource, '/api/routes')
api.add_resource(FiltersResource, '/api/filters')
api.add_resource(SummaryResource, '/api/summary')

if __name__ == '__main__':
    app.run(host=FLASK_HOST, port=FLASK_PORT, debug=DEBUG)
