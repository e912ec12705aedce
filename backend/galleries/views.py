import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.core.utils import create_audit_log, parse_query
from .serializers import GallerySerializer, GalleryListQuerySerializer
from .storage import galleries

logger = logging.getLogger('backend.galleries')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def gallery_list_create(request):
    """List galleries (filters: is_active, q) or create a new gallery"""
    if request.method == 'GET':
        params = parse_query(GalleryListQuerySerializer, request)
        rows = galleries.list_galleries(request.user.id, **params)
        return Response(GallerySerializer(rows, many=True).data)

    logger.info(f"User {request.user.username} creating gallery with data: {request.data}")
    serializer = GallerySerializer(data=request.data)
    if serializer.is_valid():
        gallery = galleries.create_gallery(request.user.id, serializer.validated_data)
        create_audit_log(request, 'create', 'Gallery', gallery.id, object_name=gallery.name)
        logger.info(f"Gallery '{gallery.name}' created by {request.user.username}")
        return Response(GallerySerializer(gallery).data, status=status.HTTP_201_CREATED)
    logger.warning(f"Gallery creation validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def gallery_detail(request, pk):
    """Retrieve, update or delete a gallery"""
    user_id = request.user.id

    if request.method == 'GET':
        gallery = galleries.get_gallery(user_id, pk)
        return Response(GallerySerializer(gallery).data)

    elif request.method == 'PATCH':
        serializer = GallerySerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"Gallery patch validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        gallery = galleries.update_gallery(user_id, pk, serializer.validated_data)
        create_audit_log(request, 'update', 'Gallery', pk, changes=serializer.validated_data, object_name=gallery.name)
        logger.info(f"Gallery {pk} patched by {request.user.username}")
        return Response(GallerySerializer(gallery).data)

    else:  # DELETE
        galleries.delete_gallery(user_id, pk)
        create_audit_log(request, 'delete', 'Gallery', pk)
        logger.info(f"Gallery {pk} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)
