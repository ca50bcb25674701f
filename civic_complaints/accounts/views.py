from django.contrib import messages
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.views import View

from civic_portal.errors import Conflict, InvalidInput
from civic_portal.http import JsonView, parse_json_body

from .forms import RegistrationForm
from .services import register_user, serialize_user


class SignUpView(View):
    template_name = "registration/signup.html"

    def get(self, request):
        return render(request, self.template_name, {"form": RegistrationForm()})

    def post(self, request):
        try:
            register_user(request.POST)
        except InvalidInput as exc:
            return render(request, self.template_name, {"form": exc.form})
        except Conflict as exc:
            form = RegistrationForm(request.POST)
            form.is_valid()
            form.add_error("email", exc.message)
            return render(request, self.template_name, {"form": form}, status=409)
        messages.success(request, "Account created successfully. Please log in.")
        return redirect("login")


class RegisterAPIView(JsonView):
    def post(self, request):
        user = register_user(parse_json_body(request))
        return JsonResponse(
            {"message": "User registered successfully", "user": serialize_user(user)},
            status=201,
        )
