from flask import jsonify, request

from schemas import flatten_errors, has_missing_fields


class BadPage(ValueError):
    pass


def api_error(message, status, errors=None):
    body = {"error": message}
    if errors:
        body["errors"] = errors
    return jsonify(body), status


def validation_error(exc, fallback="Invalid input"):
    errors = flatten_errors(exc)
    message = "Missing required fields" if has_missing_fields(errors) else fallback
    return api_error(message, 400, errors)


def page_argument():
    # Non-numeric values fall back to the first page
    page = request.args.get("page", 1, type=int)
    if page < 1:
        raise BadPage("Page must be a positive number")
    return page


def page_payload(page, schema):
    return {
        "hits": schema.dump(page.hits, many=True),
        "Page": page.page,
        "totalItem": page.total,
        "totalPages": page.total_pages,
        "ItemPerPage": page.size,
    }
