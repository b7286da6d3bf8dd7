# accounts/forms.py
from django import forms
from django.utils.translation import gettext_lazy as _


class LoginForm(forms.Form):
    email = forms.CharField(label=_("Email"), max_length=254)
    password = forms.CharField(label=_("Password"), widget=forms.PasswordInput, strip=False)

    def clean(self):
        cleaned_data = super().clean()
        email = cleaned_data.get("email")
        password = cleaned_data.get("password")

        if not email or not password:
            raise forms.ValidationError(_("Please enter your email and password."))

        return cleaned_data


class RegisterForm(forms.Form):
    email = forms.CharField(label=_("Email"), max_length=254)
    password = forms.CharField(label=_("Password"), widget=forms.PasswordInput, strip=False)


class PasswordResetRequestForm(forms.Form):
    email = forms.CharField(label=_("Email"), max_length=254)


class PasswordResetVerifyForm(forms.Form):
    email = forms.CharField(label=_("Email"), max_length=254)
    code = forms.CharField(label=_("Code"), max_length=12)
    new_password = forms.CharField(label=_("New password"), widget=forms.PasswordInput, strip=False)
