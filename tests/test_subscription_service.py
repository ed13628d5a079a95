import asyncio

import pytest

from app.domain.errors import ConflictError, NotFoundError, ValidationError
from app.domain.models import SubscriptionPlan, SubscriptionStatus
from app.domain.policies import StrictTransitionPolicy
from app.services.subscription_notifier import SubscriptionNotifier
from app.services.subscription_service import SubscriptionService

from .support import NOW, days_from_now


class RecordingClient:
    def __init__(self, result=True):
        self.result = result
        self.messages = []

    async def send_subscription_confirmation_email(self, message):
        self.messages.append(message)
        return self.result


class ExplodingClient:
    async def send_subscription_confirmation_email(self, message):
        raise RuntimeError("notification service exploded")


@pytest.fixture
def service(subscription_repository):
    return SubscriptionService(subscription_repository, clock=lambda: NOW)


def trial_values(user_id="user-1", **overrides):
    values = {
        "user_id": user_id,
        "stripe_customer_id": f"cus_{user_id}",
        "trial_start": NOW,
        "trial_end": days_from_now(7),
    }
    values.update(overrides)
    return values


@pytest.mark.asyncio
async def test_create_applies_defaults(service):
    subscription = await service.create(trial_values())

    assert len(subscription.id) == 24
    assert subscription.status == SubscriptionStatus.TRIAL
    assert subscription.plan == SubscriptionPlan.MONTHLY
    assert subscription.monthly_price == 2000
    assert subscription.yearly_price == 20000
    assert subscription.currency == "eur"
    assert subscription.is_trial_active is True
    assert subscription.cancel_at_period_end is False


@pytest.mark.asyncio
async def test_second_subscription_for_user_conflicts(service):
    await service.create(trial_values())

    with pytest.raises(ConflictError):
        await service.create(trial_values(stripe_customer_id="cus_other"))

    assert len(await service.find_all()) == 1


@pytest.mark.asyncio
async def test_storage_constraint_catches_lost_race(service, subscription_repository):
    subscription_repository.create(trial_values())

    class StaleLookup:
        def __getattr__(self, name):
            return getattr(subscription_repository, name)

        def get_by_field(self, field, value):
            return None

    racing = SubscriptionService(StaleLookup(), clock=lambda: NOW)

    with pytest.raises(ConflictError, match="already has a subscription"):
        await racing.create(trial_values())


@pytest.mark.asyncio
async def test_repeated_creates_for_one_user_leave_one_record(service):
    results = await asyncio.gather(
        *(service.create(trial_values()) for _ in range(5)), return_exceptions=True
    )

    created = [item for item in results if not isinstance(item, Exception)]
    assert len(created) == 1
    assert all(isinstance(item, ConflictError) for item in results if isinstance(item, Exception))


@pytest.mark.asyncio
async def test_find_all_pages_in_creation_order(service):
    for index in range(3):
        await service.create(trial_values(user_id=f"user-{index}"))

    page = await service.find_all(limit=2, offset=1)

    assert [item.user_id for item in page] == ["user-1", "user-2"]


@pytest.mark.asyncio
async def test_find_one_raises_when_missing(service):
    with pytest.raises(NotFoundError):
        await service.find_one("f" * 24)


@pytest.mark.asyncio
async def test_lookups_by_billing_identifiers(service):
    created = await service.create(trial_values(stripe_subscription_id="sub_1"))

    assert (await service.find_by_stripe_customer_id("cus_user-1")).id == created.id
    assert (await service.find_by_stripe_subscription_id("sub_1")).id == created.id
    assert await service.find_by_stripe_subscription_id("sub_missing") is None
    assert await service.find_by_user_id("nobody") is None


@pytest.mark.asyncio
async def test_update_writes_only_given_fields(service):
    created = await service.create(trial_values(card_validated=False))

    updated = await service.update(created.id, {"card_validated": True})

    assert updated.card_validated is True
    assert updated.trial_end == created.trial_end
    assert updated.stripe_customer_id == created.stripe_customer_id


@pytest.mark.asyncio
async def test_update_cannot_move_subscription_onto_taken_user(service):
    await service.create(trial_values(user_id="user-a"))
    second = await service.create(trial_values(user_id="user-b"))

    with pytest.raises(ConflictError):
        await service.update(second.id, {"user_id": "user-a"})


@pytest.mark.asyncio
async def test_update_by_stripe_subscription_id(service):
    await service.create(trial_values(stripe_subscription_id="sub_1"))

    updated = await service.update_by_stripe_subscription_id(
        "sub_1", {"status": SubscriptionStatus.ACTIVE, "current_period_end": days_from_now(30)}
    )

    assert updated.status == SubscriptionStatus.ACTIVE
    with pytest.raises(NotFoundError):
        await service.update_by_stripe_subscription_id("sub_missing", {"card_validated": True})


@pytest.mark.asyncio
async def test_remove_returns_deleted_record(service):
    created = await service.create(trial_values())

    removed = await service.remove(created.id)

    assert removed.id == created.id
    assert await service.find_by_user_id("user-1") is None
    with pytest.raises(NotFoundError):
        await service.remove(created.id)


@pytest.mark.asyncio
async def test_status_without_subscription(service):
    view = await service.get_status("nobody")

    assert view.subscription is None
    assert view.is_active is False
    assert view.is_trial_active is False
    assert view.days_left is None
    assert await service.is_active("nobody") is False


@pytest.mark.asyncio
async def test_status_and_auth_projection_agree(service):
    await service.create(trial_values(trial_end=days_from_now(2.2)))

    view = await service.get_status("user-1")
    auth = await service.get_status_for_auth_service("user-1")

    assert view.is_active is auth.is_active is True
    assert view.is_trial_active is auth.trial_active is True
    assert view.days_left == auth.days_remaining == 3
    assert auth.has_subscription is True
    assert auth.plan == SubscriptionPlan.MONTHLY
    assert auth.status == SubscriptionStatus.TRIAL


@pytest.mark.asyncio
async def test_expired_subscription_reports_zero_days_to_auth_service(service):
    await service.create(
        trial_values(
            status=SubscriptionStatus.ACTIVE,
            trial_end=days_from_now(-10),
            current_period_end=days_from_now(-1),
            cancel_at_period_end=True,
        )
    )

    view = await service.get_status("user-1")
    auth = await service.get_status_for_auth_service("user-1")

    assert view.is_active is False
    assert view.days_left is None
    assert auth.is_active is False
    assert auth.days_remaining == 0
    assert auth.cancel_at_period_end is True


@pytest.mark.asyncio
async def test_auth_projection_without_subscription(service):
    auth = await service.get_status_for_auth_service("nobody")

    assert auth.has_subscription is False
    assert auth.plan is None
    assert auth.status is None
    assert auth.days_remaining == 0


@pytest.mark.asyncio
async def test_update_status_and_change_plan_require_existing_subscription(service):
    with pytest.raises(NotFoundError):
        await service.update_status("f" * 24, SubscriptionStatus.ACTIVE)
    with pytest.raises(NotFoundError):
        await service.change_plan("nobody", SubscriptionPlan.YEARLY)


@pytest.mark.asyncio
async def test_change_plan(service):
    await service.create(trial_values())

    updated = await service.change_plan("user-1", SubscriptionPlan.YEARLY)

    assert updated.plan == SubscriptionPlan.YEARLY
    assert updated.billed_amount == 20000


@pytest.mark.asyncio
async def test_permissive_policy_accepts_any_transition(service):
    created = await service.create(trial_values(status=SubscriptionStatus.CANCELED))

    updated = await service.update_status(created.id, SubscriptionStatus.ACTIVE)

    assert updated.status == SubscriptionStatus.ACTIVE


@pytest.mark.asyncio
async def test_strict_policy_rejects_leaving_canceled(subscription_repository):
    service = SubscriptionService(
        subscription_repository, transition_policy=StrictTransitionPolicy(), clock=lambda: NOW
    )
    created = await service.create(trial_values())

    active = await service.update_status(created.id, SubscriptionStatus.ACTIVE)
    canceled = await service.update_status(active.id, SubscriptionStatus.CANCELED)

    assert canceled.status == SubscriptionStatus.CANCELED
    with pytest.raises(ValidationError):
        await service.update_status(created.id, SubscriptionStatus.ACTIVE)
    assert (await service.find_one(created.id)).status == SubscriptionStatus.CANCELED


@pytest.mark.asyncio
async def test_create_sends_confirmation_email(subscription_repository, user_repository):
    user_repository.upsert("user-1", "ada@example.com", "Ada", "Lovelace")
    client = RecordingClient()
    notifier = SubscriptionNotifier(user_repository, client)
    service = SubscriptionService(subscription_repository, notifier=notifier, clock=lambda: NOW)

    await service.create(trial_values(plan=SubscriptionPlan.YEARLY))
    await notifier.drain()

    assert len(client.messages) == 1
    message = client.messages[0]
    assert message.email == "ada@example.com"
    assert message.plan == "yearly"
    assert message.status == "trial"
    assert message.amount == 20000
    assert message.trial_end == days_from_now(7)


@pytest.mark.asyncio
async def test_notification_failure_does_not_affect_create(subscription_repository, user_repository):
    user_repository.upsert("user-1", "ada@example.com", "Ada", "Lovelace")
    notifier = SubscriptionNotifier(user_repository, ExplodingClient())
    service = SubscriptionService(subscription_repository, notifier=notifier, clock=lambda: NOW)

    created = await service.create(trial_values())
    await notifier.drain()

    assert (await service.find_by_user_id("user-1")).id == created.id
    assert notifier.pending == 0


@pytest.mark.asyncio
async def test_user_without_email_is_skipped(subscription_repository, user_repository):
    user_repository.upsert("user-1", None, "Ada", "Lovelace")
    client = RecordingClient()
    notifier = SubscriptionNotifier(user_repository, client)
    service = SubscriptionService(subscription_repository, notifier=notifier, clock=lambda: NOW)

    await service.create(trial_values())
    await notifier.drain()

    assert client.messages == []


@pytest.mark.asyncio
async def test_drain_cancels_deliveries_past_the_timeout(subscription_repository, user_repository):
    user_repository.upsert("user-1", "ada@example.com", "Ada", "Lovelace")

    class HangingClient:
        async def send_subscription_confirmation_email(self, message):
            await asyncio.sleep(60)
            return True

    notifier = SubscriptionNotifier(user_repository, HangingClient(), shutdown_timeout=0.05)
    service = SubscriptionService(subscription_repository, notifier=notifier, clock=lambda: NOW)

    await service.create(trial_values())
    assert notifier.pending == 1
    await notifier.drain()

    assert notifier.pending == 0


@pytest.mark.asyncio
async def test_auth_projection_uses_paid_period_after_trial_ends(service):
    await service.create(
        trial_values(
            status=SubscriptionStatus.ACTIVE,
            is_trial_active=True,
            trial_end=days_from_now(-5),
            current_period_end=days_from_now(12),
        )
    )

    auth = await service.get_status_for_auth_service("user-1")

    assert auth.is_active is True
    assert auth.trial_active is False
    assert auth.days_remaining == 12


@pytest.mark.asyncio
async def test_create_without_user_is_validation_error(service):
    with pytest.raises(ValidationError, match="userId is required"):
        await service.create({"stripe_customer_id": "cus_1"})
