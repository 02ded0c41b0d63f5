"""Injects the analysis section into the submission wizard."""

from typing import Any

from ..core.models import SectionType, WizardSection, WizardStep
from ..core.request import RequestContext
from ..core.templates import AssetPriority, OutputBuffer, TemplateRenderer, TemplateState
from ..core.wizard import SUBMISSION_PAGE
from .gate import EligibilityGate


SECTION_ID = "santaaneAiSection"
SECTION_TEMPLATE = "santaaneAiSection.html"
TARGET_STEP = "details"
ASSET_CONTEXT = "backend"

# Request attribute holding this render's eligibility
ELIGIBLE_ATTRIBUTE = "premium_submission_helper.eligible"

# (asset id, path inside the plugin, kind)
ASSETS = [
    (
        "plugin-premium-analysis-santaane-css",
        "vendor/css/fontawesome-free-6.7.2-web/css/all.min.css",
        "style",
    ),
    (
        "plugin-premium-analysis-santaane-font-awesome-css",
        "css/premiumAnalysisSantaane.css",
        "style",
    ),
    (
        "plugin-premium-analysis-santaane-js",
        "js/premiumAnalysisSantaane.js",
        "script",
    ),
]


class WizardSectionInjector:
    """Hook handlers that add the premium section to the wizard.

    The eligibility result travels on the ``RequestContext`` from
    ``on_template_display`` to ``on_wizard_section``; nothing about a
    request is kept on the injector.
    """

    def __init__(self, gate: EligibilityGate, plugin_path: str, template_resource: str):
        """Initialize injector.

        Args:
            gate: Eligibility gate consulted once per page render.
            plugin_path: URL path of the plugin's static files.
            template_resource: Renderer name of the section template.
        """
        self.gate = gate
        self.plugin_path = plugin_path.strip("/")
        self.template_resource = template_resource

    def on_template_display(self, payload: dict[str, Any]) -> bool:
        """Register assets and the wizard section for eligible visitors.

        Args:
            payload: Dict with 'context' (RequestContext) and 'template'
                (TemplateState).

        Returns:
            False, so the host keeps its default processing.
        """
        context: RequestContext = payload["context"]
        template: TemplateState = payload["template"]

        if context.requested_page != SUBMISSION_PAGE:
            return False

        eligible = self.gate.is_eligible(context.venue, context.visitor)
        context.set_attribute(ELIGIBLE_ATTRIBUTE, eligible)

        if not eligible:
            return False

        self.register_assets(template, context.base_url)

        steps = template.get_state("steps")
        if steps:
            template.set_state({"steps": self.inject_section(steps)})

        return False

    def on_wizard_section(self, payload: dict[str, Any]) -> bool:
        """Contribute the section markup when this render was eligible.

        Args:
            payload: Dict with 'context' (RequestContext), 'section_id',
                'renderer' (TemplateRenderer) and 'output' (OutputBuffer).

        Returns:
            False, so the host keeps its default processing.
        """
        if payload.get("section_id") != SECTION_ID:
            return False

        context: RequestContext = payload["context"]
        if context.get_attribute(ELIGIBLE_ATTRIBUTE) is not True:
            return False

        renderer: TemplateRenderer = payload["renderer"]
        output: OutputBuffer = payload["output"]

        markup = renderer.fetch(
            self.template_resource,
            venue=context.venue,
            base_url=context.base_url,
        )
        output.append(
            f"<template v-else-if=\"section.id === '{SECTION_ID}'\">{markup}</template>"
        )
        return False

    def register_assets(self, template: TemplateState, base_url: str) -> None:
        for asset_id, path, kind in ASSETS:
            url = f"{base_url}/{self.plugin_path}/{path}"
            if kind == "style":
                template.assets.add_stylesheet(
                    asset_id, url, contexts=ASSET_CONTEXT, priority=AssetPriority.LATE
                )
            else:
                template.assets.add_script(
                    asset_id, url, contexts=ASSET_CONTEXT, priority=AssetPriority.LATE
                )

    def inject_section(self, steps: list[WizardStep]) -> list[WizardStep]:
        """Append the section to the target step, once.

        Other steps are returned untouched.
        """
        injected = []
        for step in steps:
            if step.id == TARGET_STEP and not step.has_section(SECTION_ID):
                step = step.model_copy(
                    update={
                        "sections": [
                            *step.sections,
                            WizardSection(id=SECTION_ID, type=SectionType.TEMPLATE),
                        ]
                    }
                )
            injected.append(step)
        return injected
