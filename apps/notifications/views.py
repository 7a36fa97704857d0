"""
Notification Views
The signed-in user's in-app inbox
"""

from django.views.decorators.http import require_http_methods

from core.utils.responses import json_response
from apps.vendors.decorators import login_required_json, service_errors_as_json
from .services import notification_service


def serialize_notification(notification):
    return {
        'id': notification.pk,
        'type': notification.notification_type,
        'title': notification.title,
        'message': notification.message,
        'link': notification.link,
        'data': notification.data,
        'is_read': notification.is_read,
        'read_at': notification.read_at,
        'created_at': notification.created_at,
    }


@login_required_json
@require_http_methods(["GET", "DELETE"])
@service_errors_as_json
def inbox(request):
    """
    GET: notifications, newest first (?unread=1 for unread only)
    DELETE: clear the inbox
    """
    if request.method == 'DELETE':
        return json_response({'success': True, 'deleted': notification_service.delete_all(request.user.pk)})

    limit = request.GET.get('limit', '')
    notifications = notification_service.list_for_user(
        request.user.pk,
        unread_only=request.GET.get('unread') in ('1', 'true'),
        limit=int(limit) if limit.isdigit() else 50,
    )
    return json_response({
        'notifications': [serialize_notification(n) for n in notifications],
        'unread_count': notification_service.unread_count(request.user.pk),
    })


@login_required_json
@require_http_methods(["GET"])
def unread_count(request):
    return json_response({'unread_count': notification_service.unread_count(request.user.pk)})


@login_required_json
@require_http_methods(["POST"])
@service_errors_as_json
def mark_read(request, notification_id):
    notification = notification_service.mark_read(notification_id, user_id=request.user.pk)
    return json_response({'success': True, 'notification': serialize_notification(notification)})


@login_required_json
@require_http_methods(["POST"])
def mark_all_read(request):
    return json_response({'success': True, 'updated': notification_service.mark_all_read(request.user.pk)})


@login_required_json
@require_http_methods(["DELETE"])
@service_errors_as_json
def delete(request, notification_id):
    notification_service.delete(notification_id, user_id=request.user.pk)
    return json_response({'success': True})
