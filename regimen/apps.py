# -*- coding: utf-8 -*-
from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class RegimenConfig(AppConfig):
    name = "regimen"
    verbose_name = _("Regimen")
    default_auto_field = "django.db.models.AutoField"
