"""The premium submission helper as a registrable hook handler."""

from ..core.plugins import PluginAPI
from .gate import EligibilityGate
from .injector import SECTION_TEMPLATE, WizardSectionInjector


class PremiumSubmissionHelper:
    """Wires the eligibility gate and section injector into a host.

    Implements the host's ``HookHandler`` interface; the host's hook
    dispatch is reached only through the ``PluginAPI`` handed to
    ``register``.
    """

    name = "premium_submission_helper"
    display_name = "Premium Submission Helper"
    description = "Plugin to assist premium submission with Santaane AI analysis."

    def __init__(self):
        self.api: PluginAPI | None = None
        self.gate: EligibilityGate | None = None
        self.injector: WizardSectionInjector | None = None

    @property
    def registered(self) -> bool:
        return self.api is not None

    def register(self, api: PluginAPI) -> bool:
        """Attach the two wizard hooks.

        Raises:
            PermissionError: If the manifest lacks a required permission.
        """
        self.gate = EligibilityGate(api, logger=api.logger)
        self.injector = WizardSectionInjector(
            gate=self.gate,
            plugin_path=api.plugin_path,
            template_resource=api.template_resource(SECTION_TEMPLATE),
        )
        api.register_hook("template_display", self.injector.on_template_display)
        api.register_hook("wizard_section", self.injector.on_wizard_section)
        self.api = api
        api.logger.info(f"{self.display_name} registered")
        return True

    def unregister(self) -> None:
        """Forget the host; its hook manager drops the callbacks."""
        self.api = None
        self.gate = None
        self.injector = None
