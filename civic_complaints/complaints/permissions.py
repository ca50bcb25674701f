from django.contrib.auth.mixins import LoginRequiredMixin, UserPassesTestMixin
from django.shortcuts import redirect


def is_admin(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "is_admin", False))


class AdminRequiredMixin(LoginRequiredMixin, UserPassesTestMixin):
    """Gate for every admin view: anonymous users go to login, other users go home.

    Set ``admin_methods`` to gate only some HTTP methods of a view.
    """

    admin_methods = None
    enforce_csrf = True

    def dispatch(self, request, *args, **kwargs):
        if self.admin_methods is not None and request.method.lower() not in self.admin_methods:
            return super(UserPassesTestMixin, self).dispatch(request, *args, **kwargs)
        return super().dispatch(request, *args, **kwargs)

    def test_func(self):
        return is_admin(self.request.user)

    def handle_no_permission(self):
        if self.request.user.is_authenticated:
            return redirect("home")
        return super().handle_no_permission()
