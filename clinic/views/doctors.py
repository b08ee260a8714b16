from django.conf import settings
from django.db.models import Prefetch
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic import messages
from clinic.exceptions import action_failure, failure, invalid_inputs, success
from clinic.models import User, UserRole
from clinic.permissions import IsAdminRole, is_admin
from clinic.serializers.users import DoctorProfileSerializer, DoctorSerializer
from clinic.services import users as user_service
from clinic.services.claims import push_session_update
from clinic.services.email import send_verification_email
from clinic.services.tokens import generate_token
from clinic.views.listing import BadListParams, paginate, search


def doctors_queryset():
    return (User.objects.filter(user_roles__role__name=settings.DOCTOR_ROLE)
            .distinct().order_by('name')
            .prefetch_related('specialities', 'timings',
                              Prefetch('user_roles', queryset=UserRole.objects.select_related('role'))))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def doctors(request):
    """List doctors, or (admin) add one.

    Query params for ``GET``:
      - q: search in name/city
      - speciality: speciality id
      - page, pageSize: pagination (optional)
    """
    if request.method == 'GET':
        qs = search(doctors_queryset(), request, ['name', 'city'])
        speciality = request.query_params.get('speciality')
        if speciality and speciality.isdigit():
            qs = qs.filter(specialities__id=int(speciality))
        try:
            items, pagination = paginate(qs, request)
        except BadListParams:
            return invalid_inputs()
        return success(data=[user_service.doctor_payload(d) for d in items], pagination=pagination)

    if not is_admin(request):
        return failure(messages.AUTH.UNAUTHORIZED, 403)
    s = DoctorSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    try:
        doctor = user_service.add_doctor(s.validated_data, image=request.FILES.get('image'))
        send_verification_email(doctor, generate_token(doctor.pk))
    except Exception as exc:
        return action_failure(exc)
    return success(messages.USER.DOCTOR_ADDED, code=201, id=doctor.pk)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def doctor_detail(request, doctor_id: int):
    doctor = doctors_queryset().filter(pk=doctor_id).first()
    if doctor is None:
        return failure(messages.USER.NOT_FOUND, 404)

    if request.method == 'GET':
        return success(doctor=user_service.doctor_payload(doctor))

    # doctors edit their own profile, admins edit anyone's
    if doctor.pk != request.user.pk and not is_admin(request):
        return failure(messages.AUTH.UNAUTHORIZED, 403)
    s = DoctorProfileSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    try:
        doctor, _ = user_service.update_doctor_profile(
            doctor, s.validated_data,
            image=request.FILES.get('image'), cover=request.FILES.get('cover'),
        )
    except Exception as exc:
        return action_failure(exc)

    response = success(messages.USER.PROFILE_UPDATED)
    if doctor.pk == request.user.pk:
        push_session_update(request, response, session=request.auth)
    return response


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def delete_doctor(request, doctor_id: int):
    if not doctors_queryset().filter(pk=doctor_id).exists():
        return failure(messages.USER.NOT_FOUND, 404)
    user_service.delete_users([doctor_id])
    return success(messages.USER.DELETED)
