from uuid import UUID

from ninja import ModelSchema, Schema

from accounts.models import ClaimsSchema, University, User

__all__ = ["ClaimsSchema", "UniversitySchema", "UserSchema", "UserProfileSchema", "ProfileUpdateSchema"]


class UniversitySchema(ModelSchema):
    class Meta:
        model = University
        fields = ("id", "name", "slug")


class UserSchema(ModelSchema):
    display_name: str

    class Meta:
        model = User
        fields = ("id", "username", "email", "first_name", "last_name", "preferred_name", "language")

    @staticmethod
    def resolve_display_name(obj: User) -> str:
        return obj.get_display_name()


class UserProfileSchema(Schema):
    universities: list[UniversitySchema]


class ProfileUpdateSchema(Schema):
    university_ids: list[UUID]
