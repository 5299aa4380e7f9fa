"""
HTTP Client Utilities
Helpers for JSON calls between the coordinator and its workers
"""

import requests

from mrcount.errors import WorkerCallError


def worker_url(address, path):
    """
    Build the URL for a worker route

    Args:
        address: Worker address, either 'host:port' or a full 'http://host:port' URL
        path: Route on the worker (e.g. '/map')

    Returns:
        str: Absolute URL
    """
    base = address if '://' in address else f"http://{address}"
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


def post_json(address, path, payload, timeout):
    """
    POST a JSON payload to a worker and return the decoded JSON body

    Args:
        address: Worker address
        path: Route on the worker
        payload: JSON-serializable request body
        timeout: Per-call timeout in seconds, covering connect and read

    Returns:
        dict: Decoded response body

    Raises:
        WorkerCallError: On timeout, connection failure, non-2xx status or a non-object body
    """
    url = worker_url(address, path)
    try:
        response = requests.post(url, json=payload, timeout=timeout)
        response.raise_for_status()
        body = response.json()
    except requests.Timeout:
        raise WorkerCallError(url, f"timed out after {timeout}s")
    except requests.HTTPError as e:
        raise WorkerCallError(url, f"HTTP {e.response.status_code}")
    except requests.RequestException as e:
        raise WorkerCallError(url, f"request failed: {e}")
    except ValueError:
        raise WorkerCallError(url, "response body is not JSON")

    if not isinstance(body, dict):
        raise WorkerCallError(url, "response body is not a JSON object")
    return body
