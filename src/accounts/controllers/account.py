from ninja_extra import api_controller, route

from accounts import schema
from accounts.models import User, UserProfile
from accounts.service import profile_service
from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.throttling import UserDefaultThrottle, WriteThrottle


@api_controller("/me", tags=["Account"], auth=I18nJWTAuth(), throttle=UserDefaultThrottle())
class AccountController(UserAwareController):
    @route.get("/", url_name="me", response=schema.UserSchema)
    def me(self) -> User:
        """Retrieve the authenticated user."""
        return self.user()

    @route.get("/claims", url_name="my_claims", response=schema.ClaimsSchema)
    def my_claims(self) -> schema.ClaimsSchema:
        """The caller's derived authorization claims.

        Claims mirror approved memberships and officer roles per club. They are a cache:
        club-sensitive operations always re-check the membership record itself.
        """
        return self.claims()

    @route.get("/profile", url_name="my_profile", response=schema.UserProfileSchema)
    def my_profile(self) -> UserProfile:
        """The caller's campus affiliations."""
        return profile_service.get_profile(self.user())

    @route.put("/profile", url_name="update_my_profile", response=schema.UserProfileSchema, throttle=WriteThrottle())
    def update_my_profile(self, payload: schema.ProfileUpdateSchema) -> UserProfile:
        """Replace the caller's campus affiliations. Unknown university ids are rejected."""
        return profile_service.set_universities(self.user(), payload.university_ids)
