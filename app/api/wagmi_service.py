#!/usr/bin/env python3
"""
WAGMI Service API

A simple Flask API exposing POST /wagmi, which either echoes a greeting or
adds two bounded numbers. This is designed to be deployed as a Kubernetes
service behind liveness and readiness probes.
"""

from flask import Flask, request, jsonify
from werkzeug.exceptions import BadRequest, RequestEntityTooLarge
import logging
import os
import time

from wagmi_lib import (
    handle_wagmi,
    iso_timestamp,
    InvalidInputError,
    INVALID_INPUT,
    INTERNAL_ERROR,
    ROUTE_NOT_FOUND,
)

# Configure logging
log_level = os.environ.get('LOG_LEVEL', 'INFO')
numeric_level = getattr(logging, log_level.upper(), None)
if not isinstance(numeric_level, int):
    numeric_level = logging.INFO

logging.basicConfig(
    level=numeric_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("wagmi_service")

START_TIME = time.monotonic()

# Create Flask application
app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('MAX_CONTENT_LENGTH', 1024 * 1024))


def read_payload():
    """
    Read the JSON body of the current request.

    Returns:
        The parsed JSON value, or None when there is no JSON body

    Raises:
        InvalidInputError: If the body is oversize or not valid JSON
    """
    if not request.is_json:
        return None
    try:
        if not request.get_data(cache=True).strip():
            return None
        return request.get_json()
    except RequestEntityTooLarge:
        raise InvalidInputError(f"Request body over {app.config['MAX_CONTENT_LENGTH']} bytes")
    except BadRequest:
        raise InvalidInputError("Malformed JSON body")


@app.route('/', methods=['GET'], provide_automatic_options=False)
def index():
    """Status endpoint."""
    return jsonify({
        'status': 'WAGMI-9000 Echo Unit Online',
        'timestamp': iso_timestamp()
    }), 200


@app.route('/health', methods=['GET'], provide_automatic_options=False)
def health_check():
    """Health check endpoint for Kubernetes liveness and readiness probes."""
    return jsonify({
        'status': 'healthy',
        'uptime': round(time.monotonic() - START_TIME, 3)
    }), 200


@app.route('/wagmi', methods=['POST'], provide_automatic_options=False)
def wagmi():
    """
    Greet the caller or add two numbers.

    Expected JSON payload (optional):
    {
        "a": number,
        "b": number
    }

    Returns one of:
    {"message": "wagmi", "timestamp": string, "lang": "Python"}
    {"result": number, "a": number, "b": number, "status": "success"}
    {"error": "Invalid input"}
    """
    try:
        payload = read_payload()
        body, status = handle_wagmi(payload)

        if 'result' in body:
            logger.info(f"Addition performed: {body['a']} + {body['b']} = {body['result']}")
        elif status != 200:
            logger.debug(f"Rejected payload: {payload}")

        return jsonify(body), status

    except InvalidInputError as e:
        logger.debug(f"Invalid request: {e}")
        return jsonify({'error': INVALID_INPUT}), 400

    except Exception:
        logger.exception("Error processing request")
        return jsonify({'error': INTERNAL_ERROR}), 500


@app.errorhandler(404)
@app.errorhandler(405)
def route_not_found(e):
    """Any undefined route or method."""
    return jsonify({'error': ROUTE_NOT_FOUND}), 404


@app.errorhandler(500)
def internal_error(e):
    """Failures outside the route handlers."""
    logger.error(f"Server error: {e}")
    return jsonify({'error': INTERNAL_ERROR}), 500


if __name__ == '__main__':
    # For local development only
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 3000)), debug=True)
