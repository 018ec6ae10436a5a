"""
Command-line interface for the cohortcraft package.

This module provides the CLI commands for the cohortcraft package:
- brand: Save and show brand guidelines
- create: Create a campaign and generate its cohorts, creatives and images
- generate-creatives / generate-image / edit-prompt: Fill in or redo generated content
- select-cohorts / save / show / list: Review and activate campaigns
- serve: Run the HTTP server for the generation endpoints
"""

import sys
import json
import click
from typing import Optional, Tuple

from cohortcraft import __version__
from cohortcraft.store import get_store
from cohortcraft.core.config import get_config_value
from cohortcraft.core.logging_config import get_logger, configure_logging

# Initialize logging
configure_logging()
logger = get_logger(__name__)

def _workflow():
    from cohortcraft.pipeline.campaign_workflow import CampaignWorkflow
    return CampaignWorkflow(get_store())

def _fail(e: Exception) -> None:
    logger.error(f"Error: {str(e)}")
    click.echo(f"Error: {str(e)}", err=True)
    sys.exit(1)

def _echo_campaign(campaign) -> None:
    click.echo(f"Campaign {campaign['id']}: {campaign['title']} [{campaign.get('status')}]")
    for cohort in campaign.get("cohorts", []):
        click.echo(f"  Cohort {cohort['id']}: {cohort['title']}")
        for creative in cohort.get("creatives", []):
            click.echo(f"    Creative {creative['id']}: {creative['headline']}")
            click.echo(f"      CTA: {creative.get('cta')}")
            click.echo(f"      Image: {creative.get('image_url') or '(pending)'}")

@click.group()
@click.version_option(version=__version__)
def main():
    """
    cohortcraft - AI micro-cohort and ad creative generation.

    Describe a campaign in prose and get audience segments, ad copy and
    images back.
    """
    pass

@main.group()
def brand():
    """
    Manage brand guidelines.
    """
    pass

@brand.command("set")
@click.argument('user_id', type=str)
@click.argument('guidelines_path', type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True))
def brand_set(user_id: str, guidelines_path: str):
    """
    Save brand guidelines for a user from a JSON or YAML file.

    USER_ID: Owner of the guidelines
    GUIDELINES_PATH: File with brand_name, brand_tone, primary_color, secondary_color, ...
    """
    from cohortcraft.campaign2cohort.brand_guidelines import BrandGuidelinesManager
    from cohortcraft.core.utils import load_structured_file

    try:
        values = load_structured_file(guidelines_path)
        row = BrandGuidelinesManager(get_store()).save(user_id, values)
        click.echo(f"Saved brand guidelines for {user_id}: {row['brand_name']}")
    except Exception as e:
        _fail(e)

@brand.command("show")
@click.argument('user_id', type=str)
def brand_show(user_id: str):
    """
    Show a user's brand guidelines.
    """
    from cohortcraft.campaign2cohort.brand_guidelines import BrandGuidelinesManager

    try:
        row = BrandGuidelinesManager(get_store()).get(user_id)
        if row is None:
            click.echo(f"No brand guidelines saved for {user_id}")
            return
        click.echo(json.dumps(row, indent=2))
    except Exception as e:
        _fail(e)

@main.command()
@click.argument('user_id', type=str)
@click.option('--title', '-t', type=str, required=True, help='Campaign title')
@click.option('--prompt', '-p', type=str, help='Campaign brief')
@click.option('--prompt-file', type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True),
              help='File containing the campaign brief')
@click.option('--budget', '-b', type=str, help='Campaign budget, e.g. "$5,000"')
@click.option('--channel', type=str, default='social', help='Primary channel (default: social)')
@click.option('--content-type', type=str, default='image', help='Content type (default: image)')
@click.option('--no-images', is_flag=True, default=False, help='Skip image generation')
def create(user_id: str, title: str, prompt: Optional[str] = None, prompt_file: Optional[str] = None,
           budget: Optional[str] = None, channel: str = 'social', content_type: str = 'image',
           no_images: bool = False):
    """
    Create a campaign and generate its cohorts, creatives and images.

    USER_ID: Owner of the campaign

    Examples:
      cohortcraft create user-1 -t "Monsoon getaways" -p "Promote monsoon travel to young professionals"
      cohortcraft create user-1 -t "Spring sale" --prompt-file brief.txt --budget "$5,000" --no-images
    """
    try:
        if prompt_file:
            with open(prompt_file, 'r') as f:
                prompt = f.read()
        if not prompt or not prompt.strip():
            raise click.UsageError("Provide the campaign brief with --prompt or --prompt-file")

        campaign = _workflow().run(
            user_id, title, prompt,
            budget=budget,
            primary_channel=channel,
            content_type=content_type,
            generate_images=not no_images
        )

        generation = campaign["generation"]
        _echo_campaign(campaign)
        click.echo(
            f"Generated {len(campaign['cohorts'])} cohorts ({generation['parse_mode']} response), "
            f"{generation['images']['generated']} images, {generation['images']['failed']} image failures"
        )
        for issue in generation["compliance"]:
            click.echo(f"Warning: banned phrase '{issue['phrase']}' in {issue['location']}", err=True)
    except click.UsageError:
        raise
    except Exception as e:
        _fail(e)

@main.command('generate-creatives')
@click.argument('campaign_id', type=str)
@click.option('--cohort-id', type=str, help='Generate for this cohort only, even if it already has creatives')
def generate_creatives(campaign_id: str, cohort_id: Optional[str] = None):
    """
    Generate creatives for cohorts that do not have any.

    CAMPAIGN_ID: Campaign whose cohorts are filled in
    """
    try:
        workflow = _workflow()
        if cohort_id:
            creative = workflow.creative_generator.generate_for_cohort(cohort_id, campaign_id)
            click.echo(f"Created creative {creative['id']}: {creative['headline']}")
        else:
            created = workflow.ensure_creatives(campaign_id)
            click.echo(f"Created {created} creatives")
    except Exception as e:
        _fail(e)

@main.command('generate-image')
@click.argument('creative_id', type=str)
@click.option('--prompt', '-p', type=str, help='Image prompt (default: the creative\'s stored prompt)')
@click.option('--provider', type=click.Choice(['runware', 'openai', 'replicate']),
              help='Image provider (default: image.provider from config)')
def generate_image(creative_id: str, prompt: Optional[str] = None, provider: Optional[str] = None):
    """
    Generate or regenerate the image for a creative.

    CREATIVE_ID: Creative to generate the image for
    """
    from cohortcraft.creative2image.image_generator import ImageGenerator
    from cohortcraft.core.constants import CAMPAIGN_CREATIVES_TABLE

    try:
        store = get_store()
        if not prompt:
            prompt = store.get(CAMPAIGN_CREATIVES_TABLE, creative_id).get("image_prompt")

        result = ImageGenerator(store, provider=provider).generate_for_creative(creative_id, prompt)
        click.echo(f"Image: {result['imageUrl']}")
    except Exception as e:
        _fail(e)

@main.command('edit-prompt')
@click.argument('creative_id', type=str)
@click.argument('prompt', type=str)
@click.option('--no-regenerate', is_flag=True, default=False, help='Save the prompt without generating a new image')
def edit_prompt(creative_id: str, prompt: str, no_regenerate: bool = False):
    """
    Replace a creative's image prompt and regenerate its image.
    """
    from cohortcraft.creative2image.image_generator import ImageGenerator

    try:
        creative = ImageGenerator(get_store()).update_image_prompt(
            creative_id, prompt, regenerate=not no_regenerate
        )
        click.echo(f"Updated image prompt for creative {creative_id}")
        if not no_regenerate:
            click.echo(f"Image: {creative.get('image_url')}")
    except Exception as e:
        _fail(e)

@main.command('select-cohorts')
@click.argument('campaign_id', type=str)
@click.argument('cohort_ids', type=str, nargs=-1, required=True)
def select_cohorts(campaign_id: str, cohort_ids: Tuple[str, ...]):
    """
    Keep only the given cohorts of a campaign and delete the rest.
    """
    try:
        deleted = _workflow().select_cohorts(campaign_id, list(cohort_ids))
        click.echo(f"Deleted {len(deleted)} cohorts")
    except Exception as e:
        _fail(e)

@main.command()
@click.argument('campaign_id', type=str)
@click.option('--force', is_flag=True, default=False, help='Activate even if some creatives have no image')
def save(campaign_id: str, force: bool = False):
    """
    Activate a campaign.
    """
    try:
        result = _workflow().save_campaign(campaign_id, force=force)
        if not result["saved"]:
            click.echo(
                f"Error: {len(result['pending'])} creatives have no image yet: {', '.join(result['pending'])}. "
                "Generate them first or use --force.",
                err=True
            )
            sys.exit(1)
        click.echo(f"Campaign {campaign_id} is now {result['campaign']['status']}")
    except Exception as e:
        _fail(e)

@main.command()
@click.argument('campaign_id', type=str)
@click.option('--user-id', type=str, help='Only show the campaign if it belongs to this user')
@click.option('--json', 'as_json', is_flag=True, default=False, help='Print the campaign as JSON')
def show(campaign_id: str, user_id: Optional[str] = None, as_json: bool = False):
    """
    Show a campaign with its cohorts and creatives.
    """
    try:
        campaign = _workflow().load_campaign(campaign_id, user_id=user_id)
        if as_json:
            click.echo(json.dumps(campaign, indent=2))
        else:
            _echo_campaign(campaign)
    except Exception as e:
        _fail(e)

@main.command('list')
@click.argument('user_id', type=str)
def list_campaigns(user_id: str):
    """
    List a user's campaigns, newest first.
    """
    try:
        campaigns = _workflow().list_campaigns(user_id)
        if not campaigns:
            click.echo(f"No campaigns for {user_id}")
        for campaign in campaigns:
            click.echo(f"{campaign['id']}  {campaign['status']:<8}  {campaign['created_at'][:10]}  {campaign['title']}")
    except Exception as e:
        _fail(e)

@main.command()
@click.option('--host', type=str, help='Host to bind (default: server.host from config)')
@click.option('--port', type=int, help='Port to bind (default: server.port from config)')
def serve(host: Optional[str] = None, port: Optional[int] = None):
    """
    Run the HTTP server for the generation endpoints.
    """
    from cohortcraft.server import create_app

    try:
        app = create_app()
        host = host or get_config_value("server.host", "127.0.0.1")
        port = port or get_config_value("server.port", 8000)
        click.echo(f"Serving generation endpoints on http://{host}:{port}/functions/v1/")
        app.run(host=host, port=port)
    except Exception as e:
        _fail(e)

if __name__ == '__main__':
    main()
