from flask import Blueprint, request, abort
from flask_jwt_extended import create_access_token, jwt_required
from sqlalchemy import select
from schoolrbac import get_db
from schoolrbac.core.context import ActorContext, ROLE_PRINCIPAL, ROLE_STAFF
from schoolrbac.models.authz import Staff
from schoolrbac.schemas import LoginIn
from schoolrbac.services.policy import current_actor, load_staff_in_school

auth_bp = Blueprint('auth', __name__)


@auth_bp.post('/login')
def login():
    body = LoginIn.model_validate(request.get_json(silent=True) or {})
    session = get_db()
    staff = session.execute(
        select(Staff).where(Staff.email == body.email, Staff.school_code == body.school_code)
    ).scalar_one_or_none()
    if not staff or not staff.is_active or not staff.verify_password(body.password):
        abort(401, description='invalid credentials')
    actor = ActorContext(staff.id, staff.school_code, ROLE_PRINCIPAL if staff.is_principal else ROLE_STAFF)
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=actor.staff_id, additional_claims=actor.to_claims())
    return {'access_token': token, 'staff_id': actor.staff_id, 'school_code': actor.school_code, 'role': actor.role}


@auth_bp.get('/me')
@jwt_required()
def me():
    actor = current_actor()
    staff = load_staff_in_school(actor, actor.staff_id)
    return {
        'id': staff.id,
        'staff_id': staff.staff_id,
        'full_name': staff.full_name,
        'email': staff.email,
        'school_code': staff.school_code,
        'role': actor.role,
    }
