"""Premium eligibility checks for the submission helper."""

from typing import Protocol

from ..core.models import RoleAssignment, Subscription, Venue, Visitor


PREMIUM = "premium"


class SubscriptionLookup(Protocol):
    """The host data access the gate needs (a PluginAPI satisfies it)."""

    def get_user_roles(self, venue_id: int, user_id: int) -> list[RoleAssignment]: ...

    def get_individual_subscription(self, user_id: int, venue_id: int) -> Subscription | None: ...

    def get_institutional_subscriptions(self, user_id: int, venue_id: int) -> list[Subscription]: ...


class EligibilityGate:
    """Decides whether a visitor may use the premium analysis.

    Checks run in order and stop at the first success: venue role,
    individual subscription, institutional subscription. Each check
    catches its own failures and counts as "not passed", so
    ``is_eligible`` never raises.

    The role check is best-effort; the subscription checks are the
    dependable path.
    """

    def __init__(self, lookup: SubscriptionLookup, logger=None):
        self.lookup = lookup
        self.logger = logger

    def is_eligible(self, venue: Venue | None, visitor: Visitor | None) -> bool:
        """Check all premium sources for the visitor in the venue."""
        if not isinstance(venue, Venue) or not isinstance(visitor, Visitor):
            self._debug(f"Not checking eligibility for {visitor!r} in {venue!r}")
            return False

        return (
            self.has_premium_role(venue, visitor)
            or self.has_individual_subscription(venue, visitor)
            or self.has_institutional_subscription(venue, visitor)
        )

    def role_names(self, venue: Venue, visitor: Visitor) -> list[str]:
        """Short role names ("manager", "premium", ...) held in the venue."""
        try:
            return [role.short_name for role in self.lookup.get_user_roles(venue.id, visitor.id)]
        except Exception as e:
            self._debug(f"Role lookup failed for user {getattr(visitor, 'id', None)}: {e}")
            return []

    def has_premium_role(self, venue: Venue, visitor: Visitor) -> bool:
        return PREMIUM in self.role_names(venue, visitor)

    def has_individual_subscription(self, venue: Venue, visitor: Visitor) -> bool:
        try:
            subscription = self.lookup.get_individual_subscription(visitor.id, venue.id)
            return subscription is not None and self._is_active_premium(subscription)
        except Exception as e:
            self._debug(
                f"Individual subscription check failed for user {getattr(visitor, 'id', None)}: {e}"
            )
            return False

    def has_institutional_subscription(self, venue: Venue, visitor: Visitor) -> bool:
        try:
            subscriptions = self.lookup.get_institutional_subscriptions(visitor.id, venue.id)
            for subscription in subscriptions or []:
                # The lookup key is not proof of ownership
                if subscription.user_id == visitor.id and self._is_active_premium(subscription):
                    return True
        except Exception as e:
            self._debug(
                f"Institutional subscription check failed for user {getattr(visitor, 'id', None)}: {e}"
            )
        return False

    def _is_active_premium(self, subscription: Subscription) -> bool:
        return not subscription.is_expired() and subscription.type_name.strip() == PREMIUM

    def _debug(self, message: str) -> None:
        if self.logger is not None:
            self.logger.debug(message)
