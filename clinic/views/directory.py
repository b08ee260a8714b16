"""
CRUD endpoints for the hospital directory and pharmacy reference data.

Every table gets the same four endpoints from :func:`crud_views`:

    GET  /api/<prefix>              list (``q``, ``page``, ``pageSize``)
    POST /api/<prefix>              add
    GET|PUT|DELETE /api/<prefix>/<id>
    POST /api/<prefix>/delete       delete many (``ids``)

Reads are open to any signed-in user; writes need the admin role.
"""
from __future__ import annotations

from django.db import transaction
from django.urls import path
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import SAFE_METHODS, IsAuthenticated

from clinic import messages
from clinic.exceptions import action_failure, failure, invalid_inputs, success
from clinic.models import (
    Department,
    Facility,
    Hospital,
    MedicationForm,
    PharmaBrand,
    PharmaCode,
    PharmaManufacturer,
    PharmaSalt,
    Speciality,
)
from clinic.permissions import IsAdminRole, is_admin
from clinic.serializers import directory as ser
from clinic.serializers.users import IdsSerializer
from clinic.views.listing import BadListParams, paginate, search


def crud_views(model, serializer_class, msgs, *, search_fields=('name',), order_by=('name',)):
    """Build ``(collection, detail, bulk_delete)`` views for ``model``."""

    def _save(serializer):
        with transaction.atomic():
            return serializer.save()

    @api_view(['GET', 'POST'])
    @permission_classes([IsAuthenticated])
    def collection(request):
        if request.method == 'GET':
            qs = search(model.objects.order_by(*order_by), request, search_fields)
            try:
                items, pagination = paginate(qs, request)
            except BadListParams:
                return invalid_inputs()
            return success(data=serializer_class(items, many=True).data, pagination=pagination)

        if not is_admin(request):
            return failure(messages.AUTH.UNAUTHORIZED, 403)
        s = serializer_class(data=request.data)
        if not s.is_valid():
            return invalid_inputs()
        try:
            obj = _save(s)
        except Exception as exc:
            return action_failure(exc)
        return success(msgs.ADDED, code=201, id=obj.pk)

    @api_view(['GET', 'PUT', 'DELETE'])
    @permission_classes([IsAuthenticated])
    def detail(request, pk: int):
        obj = model.objects.filter(pk=pk).first()
        if obj is None:
            return failure(messages.SYSTEM.BAD_REQUEST, 404)
        if request.method in SAFE_METHODS:
            return success(data=serializer_class(obj).data)
        if not is_admin(request):
            return failure(messages.AUTH.UNAUTHORIZED, 403)

        if request.method == 'DELETE':
            obj.delete()
            return success(msgs.DELETED)

        s = serializer_class(obj, data=request.data, partial=True)
        if not s.is_valid():
            return invalid_inputs()
        try:
            _save(s)
        except Exception as exc:
            return action_failure(exc)
        return success(msgs.UPDATED)

    @api_view(['POST'])
    @permission_classes([IsAuthenticated, IsAdminRole])
    def bulk_delete(request):
        s = IdsSerializer(data=request.data)
        if not s.is_valid():
            return invalid_inputs()
        model.objects.filter(pk__in=s.validated_data['ids']).delete()
        return success(msgs.BULK_DELETED)

    name = model.__name__.lower()
    collection.__name__ = f'{name}_collection'
    detail.__name__ = f'{name}_detail'
    bulk_delete.__name__ = f'{name}_bulk_delete'
    return collection, detail, bulk_delete


TABLES = [
    ('hospitals', Hospital, ser.HospitalSerializer, messages.HOSPITAL, ('name', 'city', 'email')),
    ('departments', Department, ser.DepartmentSerializer, messages.DEPARTMENT, ('name',)),
    ('facilities', Facility, ser.FacilitySerializer, messages.FACILITY, ('name',)),
    ('specialities', Speciality, ser.SpecialitySerializer, messages.SPECIALITY, ('name',)),
    ('medication-forms', MedicationForm, ser.MedicationFormSerializer, messages.MEDICATION_FORM, ('name',)),
    ('pharma-brands', PharmaBrand, ser.PharmaBrandSerializer, messages.PHARMA_BRAND, ('name',)),
    ('pharma-salts', PharmaSalt, ser.PharmaSaltSerializer, messages.PHARMA_SALT, ('name',)),
    ('pharma-manufacturers', PharmaManufacturer, ser.PharmaManufacturerSerializer,
     messages.PHARMA_MANUFACTURER, ('name',)),
    ('pharma-codes', PharmaCode, ser.PharmaCodeSerializer, messages.PHARMA_CODE, ('code', 'description')),
]


def directory_urls() -> list:
    urls = []
    for prefix, model, serializer_class, msgs, fields in TABLES:
        order_by = ('code',) if model is PharmaCode else ('name',)
        collection, detail, bulk_delete = crud_views(
            model, serializer_class, msgs, search_fields=fields, order_by=order_by)
        slug = prefix.replace('-', '_')
        urls += [
            path(f'api/{prefix}', collection, name=f'{slug}'),
            path(f'api/{prefix}/delete', bulk_delete, name=f'{slug}_delete'),
            path(f'api/{prefix}/<int:pk>', detail, name=f'{slug}_detail'),
        ]
    return urls
