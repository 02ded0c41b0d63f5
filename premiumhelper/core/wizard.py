"""The multi-step submission wizard served by the host."""

from .models import SectionType, WizardSection, WizardStep


SUBMISSION_PAGE = "submission"


def default_steps() -> list[WizardStep]:
    """Build a fresh step list for one wizard render."""
    return [
        WizardStep(
            id="details",
            name="Details",
            sections=[
                WizardSection(id="titleAbstract", type=SectionType.FIELDS),
                WizardSection(id="keywords", type=SectionType.FIELDS),
            ],
        ),
        WizardStep(
            id="files",
            name="Upload Files",
            sections=[WizardSection(id="files", type=SectionType.FIELDS)],
        ),
        WizardStep(
            id="contributors",
            name="Contributors",
            sections=[WizardSection(id="contributors", type=SectionType.FIELDS)],
        ),
        WizardStep(
            id="editors",
            name="For the Editors",
            sections=[WizardSection(id="commentsForTheEditors", type=SectionType.FIELDS)],
        ),
        WizardStep(id="review", name="Review", sections=[]),
    ]
