"""Subscription API — plans, user subscriptions, wash redemption and renewals."""

from flask import request
from flask_restx import Namespace, Resource

from petwash.api.common import bool_arg, create_record, json_body, parse_body, schema_model, update_record
from petwash.auth import require_admin
from petwash.schemas.base import validate_payload
from petwash.schemas.response import success_response
from petwash.schemas.subscription_schema import (
    PlanCreateSchema,
    SubscriptionCancelSchema,
    SubscriptionCreateSchema,
    SubscriptionRenewSchema,
    SubscriptionUpdateSchema,
    SubscriptionUseSchema,
)
from petwash.services.subscription_service import PlanService, SubscriptionService

ns = Namespace("subscriptions", description="Subscription plans and user subscriptions", decorators=[require_admin])

plan_model = schema_model(ns, PlanCreateSchema)
subscription_model = schema_model(ns, SubscriptionCreateSchema)
subscription_update_model = schema_model(ns, SubscriptionUpdateSchema)
use_model = schema_model(ns, SubscriptionUseSchema)
cancel_model = schema_model(ns, SubscriptionCancelSchema)
renew_model = schema_model(ns, SubscriptionRenewSchema)

# ---------------------------------------------------------------------------
# Service instances
# ---------------------------------------------------------------------------
_plan_svc = PlanService()
_subscription_svc = SubscriptionService()


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------
@ns.route("/subscription-plans")
class PlanList(Resource):
    @ns.doc("list_plans")
    def get(self):
        """List plans (?isActive=, ?countryId=)."""
        return success_response(_plan_svc.list(
            is_active=bool_arg("isActive"),
            country_id=request.args.get("countryId", type=int),
        ))

    @ns.doc("create_plan")
    @ns.expect(plan_model)
    def post(self):
        return create_record(_plan_svc, PlanCreateSchema)


@ns.route("/subscription-plans/<int:plan_id>")
@ns.param("plan_id", "The plan ID")
class PlanDetail(Resource):
    @ns.doc("get_plan")
    def get(self, plan_id: int):
        return success_response(_plan_svc.get(plan_id))

    @ns.doc("update_plan")
    @ns.expect(plan_model)
    def put(self, plan_id: int):
        return update_record(_plan_svc, PlanCreateSchema, plan_id)


# ---------------------------------------------------------------------------
# User subscriptions
# ---------------------------------------------------------------------------
@ns.route("/subscriptions")
class SubscriptionList(Resource):
    @ns.doc("list_subscriptions")
    def get(self):
        """List subscriptions (?userId=, ?status=, ?planId=)."""
        return success_response(_subscription_svc.list(
            user_id=request.args.get("userId"),
            status=request.args.get("status"),
            plan_id=request.args.get("planId", type=int),
        ))

    @ns.doc("create_subscription")
    @ns.expect(subscription_model)
    def post(self):
        """Subscribe a user to a plan; the period, status and credits come from the plan."""
        data = parse_body(SubscriptionCreateSchema)
        result = _subscription_svc.subscribe(data.user_id, data.plan_id, data.payment_method)
        return success_response(result, 201)


@ns.route("/subscriptions/<int:subscription_id>")
@ns.param("subscription_id", "The subscription ID")
class SubscriptionDetail(Resource):
    @ns.doc("get_subscription")
    def get(self, subscription_id: int):
        return success_response(_subscription_svc.get(subscription_id))

    @ns.doc("update_subscription")
    @ns.expect(subscription_update_model)
    def put(self, subscription_id: int):
        return update_record(_subscription_svc, SubscriptionUpdateSchema, subscription_id)


@ns.route("/subscriptions/<int:subscription_id>/use")
@ns.param("subscription_id", "The subscription ID")
class SubscriptionUse(Resource):
    @ns.doc("use_subscription")
    @ns.expect(use_model)
    def post(self, subscription_id: int):
        """Redeem one wash credit at a station."""
        data = parse_body(SubscriptionUseSchema)
        return success_response(_subscription_svc.redeem_wash(
            subscription_id, data.station_id, data.wash_type, data.original_price,
        ))


@ns.route("/subscriptions/<int:subscription_id>/cancel")
@ns.param("subscription_id", "The subscription ID")
class SubscriptionCancel(Resource):
    @ns.doc("cancel_subscription")
    @ns.expect(cancel_model)
    def post(self, subscription_id: int):
        data = validate_payload(SubscriptionCancelSchema, json_body() or {})
        return success_response(_subscription_svc.cancel(subscription_id, data.reason, data.at_period_end))


@ns.route("/subscriptions/<int:subscription_id>/renew")
@ns.param("subscription_id", "The subscription ID")
class SubscriptionRenew(Resource):
    @ns.doc("renew_subscription")
    @ns.expect(renew_model)
    def post(self, subscription_id: int):
        data = validate_payload(SubscriptionRenewSchema, json_body() or {})
        return success_response(_subscription_svc.renew(subscription_id, data.payment_method))


@ns.route("/subscriptions/<int:subscription_id>/usage")
@ns.param("subscription_id", "The subscription ID")
class SubscriptionUsage(Resource):
    @ns.doc("subscription_usage")
    def get(self, subscription_id: int):
        return success_response(_subscription_svc.usage_history(subscription_id))
