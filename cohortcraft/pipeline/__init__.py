"""
Campaign workflow orchestration.
"""

from cohortcraft.pipeline.campaign_workflow import CampaignWorkflow
