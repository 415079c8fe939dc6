import strawberry

from app.graphql.auth.mutations import AuthMutation
from app.graphql.auth.queries import AuthQuery
from app.graphql.banners.mutations import BannerMutation
from app.graphql.banners.queries import BannerQuery
from app.graphql.billing.mutations import BillingMutation
from app.graphql.billing.queries import BillingQuery
from app.graphql.classes.mutations import ClassMutation
from app.graphql.classes.queries import ClassQuery
from app.graphql.instructors.mutations import InstructorMutation
from app.graphql.instructors.queries import InstructorQuery
from app.graphql.menu.mutations import MenuMutation
from app.graphql.menu.queries import MenuQuery
from app.graphql.notifications.mutations import NotificationMutation
from app.graphql.notifications.queries import NotificationQuery
from app.graphql.packages.mutations import PackageMutation
from app.graphql.packages.queries import PackageQuery
from app.graphql.purchases.mutations import PurchaseMutation
from app.graphql.purchases.queries import PurchaseQuery
from app.graphql.reservations.mutations import ReservationMutation
from app.graphql.reservations.queries import ReservationQuery
from app.graphql.schedule.mutations import ScheduleMutation
from app.graphql.schedule.queries import ScheduleQuery
from app.graphql.users.mutations import UserMutation
from app.graphql.users.queries import UserQuery


@strawberry.type
class Query(
    AuthQuery,
    ClassQuery,
    ScheduleQuery,
    InstructorQuery,
    PackageQuery,
    PurchaseQuery,
    UserQuery,
    ReservationQuery,
    BannerQuery,
    MenuQuery,
    NotificationQuery,
    BillingQuery,
):
    @strawberry.field
    def hello(self) -> str:
        return "Hello from Giro!"


@strawberry.type
class Mutation(
    AuthMutation,
    ClassMutation,
    ScheduleMutation,
    InstructorMutation,
    PackageMutation,
    PurchaseMutation,
    UserMutation,
    ReservationMutation,
    BannerMutation,
    MenuMutation,
    NotificationMutation,
    BillingMutation,
):
    pass


schema = strawberry.Schema(query=Query, mutation=Mutation)
