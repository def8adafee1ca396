import django_filters
from rest_framework.filters import SearchFilter

from hr_messaging.employees.models import Employee
from hr_messaging.messaging.models import Message


class MessageFilter(django_filters.FilterSet):
    unread_only = django_filters.BooleanFilter(method="filter_unread_only")

    class Meta:
        model = Message
        fields = ["unread_only", "priority", "message_type"]

    def filter_unread_only(self, queryset, name, value):
        if value:
            return queryset.unread()
        return queryset


class EmployeeDirectoryFilter(django_filters.FilterSet):
    department = django_filters.CharFilter(
        field_name="department__name", lookup_expr="icontains"
    )

    class Meta:
        model = Employee
        fields = ["department"]


class DirectorySearchFilter(SearchFilter):
    search_param = "q"
