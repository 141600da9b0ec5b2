"""
API Response Models
===================

Standardized API response format.
"""


class APIResponse:
    """Standard API response format"""

    @staticmethod
    def success(data=None, message="Success", **extra):
        response = {
            "success": True,
            "message": message,
            "data": data
        }
        response.update(extra)
        return response

    @staticmethod
    def error(message="Error", error_code=None, request_id=None, details=None):
        response = {
            "success": False,
            "message": message,
            "error_code": error_code
        }
        if details:
            response["details"] = details
        if request_id:
            response["request_id"] = request_id
        return response

    @staticmethod
    def paginated(data, pagination, message="Success", **extra):
        response = {
            "success": True,
            "message": message,
            "data": data,
            "pagination": {
                "total": pagination['total'],
                "page": pagination['page'],
                "per_page": pagination['per_page'],
                "total_pages": pagination['pages']
            }
        }
        response.update(extra)
        return response
