"""Premium Submission Helper plugin.

Adds the Santaane AI abstract analysis to the submission wizard for
visitors with a premium role or an active premium subscription.

The plugin only registers hooks; eligibility is decided per request and
carried on the request context, never stored here.
"""

from premiumhelper.santaane.helper import PremiumSubmissionHelper


helper = PremiumSubmissionHelper()


def on_load(api):
    """Called when plugin is enabled.

    Args:
        api: PluginAPI instance with limited access to the host.
    """
    helper.register(api)


def on_unload():
    """Called when plugin is disabled."""
    helper.unregister()
