"""
Tests for the CLI module.
"""

import json
import pytest
from unittest.mock import patch, MagicMock
from click.testing import CliRunner

from cohortcraft import __version__
from cohortcraft.cli import main
from cohortcraft.pipeline.campaign_workflow import CampaignWorkflow
from cohortcraft.campaign2cohort.campaign_generator import CampaignGenerator
from cohortcraft.campaign2cohort.creative_generator import CreativeGenerator
from cohortcraft.campaign2cohort.llm_client import OpenAIChatClient
from cohortcraft.creative2image.image_generator import ImageGenerator
from cohortcraft.creative2image.adapters.base import ImageGenerationAdapter


class TestCLI:
    """
    Tests for the CLI module.
    """

    @pytest.fixture
    def runner(self):
        """
        Click CLI test runner.
        """
        return CliRunner()

    @pytest.fixture
    def use_store(self, store):
        """
        Make the CLI use the test store.
        """
        with patch('cohortcraft.cli.get_store', return_value=store):
            yield store

    @pytest.fixture
    def mock_workflow(self, store, cohort_reply):
        """
        Workflow whose LLM and image calls are mocked.
        """
        llm_client = MagicMock(spec=OpenAIChatClient)
        llm_client.complete.return_value = cohort_reply
        adapter = MagicMock(spec=ImageGenerationAdapter)
        adapter.name = "mock"
        adapter.generate_image.return_value = "https://img.example/1.png"

        workflow = CampaignWorkflow(
            store,
            campaign_generator=CampaignGenerator(store, llm_client=llm_client),
            creative_generator=CreativeGenerator(store, llm_client=llm_client),
            image_generator=ImageGenerator(store, adapter=adapter)
        )
        with patch('cohortcraft.cli._workflow', return_value=workflow):
            yield workflow

    def test_version(self, runner):
        result = runner.invoke(main, ['--version'])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_brand_set_and_show(self, runner, use_store):
        with runner.isolated_filesystem():
            with open('brand.yaml', 'w') as f:
                f.write(
                    "brandName: Monsoon Escapes\n"
                    "brandTone: Warm and adventurous\n"
                    "primaryColor: '#0F766E'\n"
                    "secondaryColor: '#F59E0B'\n"
                    "doNotUse: cheap, guaranteed\n"
                )

            result = runner.invoke(main, ['brand', 'set', 'user-1', 'brand.yaml'])

        assert result.exit_code == 0
        assert "Saved brand guidelines for user-1: Monsoon Escapes" in result.output

        result = runner.invoke(main, ['brand', 'show', 'user-1'])
        assert result.exit_code == 0
        assert json.loads(result.output)["do_not_use_phrases"] == "cheap, guaranteed"

    def test_brand_set_invalid(self, runner, use_store):
        with runner.isolated_filesystem():
            with open('brand.json', 'w') as f:
                json.dump({"brandName": "M"}, f)

            result = runner.invoke(main, ['brand', 'set', 'user-1', 'brand.json'])

        assert result.exit_code == 1
        assert "Brand name must be at least 2 characters" in result.output

    def test_brand_show_missing(self, runner, use_store):
        result = runner.invoke(main, ['brand', 'show', 'user-2'])

        assert result.exit_code == 0
        assert "No brand guidelines saved for user-2" in result.output

    def test_create(self, runner, mock_workflow, store):
        result = runner.invoke(main, [
            'create', 'user-1', '-t', 'Monsoon getaways', '-p', 'Promote monsoon travel', '--budget', '$5,000'
        ])

        assert result.exit_code == 0
        assert "Cohort" in result.output
        assert "Chase the Rain" in result.output
        assert "Generated 2 cohorts (json response), 2 images, 0 image failures" in result.output
        assert len(store.select("campaigns", user_id="user-1")) == 1

    def test_create_from_prompt_file(self, runner, mock_workflow):
        with runner.isolated_filesystem():
            with open('brief.txt', 'w') as f:
                f.write("Promote monsoon travel to young professionals")

            result = runner.invoke(main, ['create', 'user-1', '-t', 'Monsoon getaways', '--prompt-file', 'brief.txt', '--no-images'])

        assert result.exit_code == 0
        assert "0 images" in result.output
        assert "(pending)" in result.output

    def test_create_without_prompt(self, runner, mock_workflow):
        result = runner.invoke(main, ['create', 'user-1', '-t', 'Monsoon getaways'])

        assert result.exit_code == 2
        assert "--prompt" in result.output

    @patch('cohortcraft.campaign2cohort.llm_client.requests.post')
    def test_create_without_api_key(self, mock_post, runner, use_store):
        result = runner.invoke(main, ['create', 'user-1', '-t', 'Monsoon getaways', '-p', 'Promote monsoon travel'])

        assert result.exit_code == 1
        assert "Missing openai API key" in result.output
        assert not mock_post.called

    @patch('cohortcraft.creative2image.adapters.runware.requests.post')
    def test_generate_image_uses_stored_prompt(self, mock_post, runner, use_store, creative, make_response, monkeypatch):
        monkeypatch.setenv("RUNWARE_API_KEY", "runware_key")
        mock_post.return_value = make_response({"images": [{"url": "https://img.example/r.png"}]})

        result = runner.invoke(main, ['generate-image', creative["id"]])

        assert result.exit_code == 0
        assert "Image: https://img.example/r.png" in result.output
        assert mock_post.call_args.kwargs["json"]["prompt"] == creative["image_prompt"]
        assert use_store.get("campaign_creatives", creative["id"])["image_url"] == "https://img.example/r.png"

    def test_generate_image_bad_provider(self, runner, use_store, creative):
        result = runner.invoke(main, ['generate-image', creative["id"], '--provider', 'midjourney'])

        assert result.exit_code == 2

    def test_generate_creatives(self, runner, mock_workflow, cohort):
        mock_workflow.creative_generator.llm_client.complete.return_value = '{"headline": "Chase the Rain", "cta": "Go"}'

        result = runner.invoke(main, ['generate-creatives', cohort["campaign_id"]])

        assert result.exit_code == 0
        assert "Created 1 creatives" in result.output

    def test_edit_prompt_without_regenerate(self, runner, use_store, creative):
        result = runner.invoke(main, ['edit-prompt', creative["id"], 'Sunlit hills', '--no-regenerate'])

        assert result.exit_code == 0
        assert use_store.get("campaign_creatives", creative["id"])["image_prompt"] == "Sunlit hills"

    def test_select_cohorts(self, runner, use_store, campaign, cohort):
        other = use_store.insert("micro_cohorts", {
            "campaign_id": campaign["id"], "title": "Remote Workers", "description": "", "demographics": ""
        })

        result = runner.invoke(main, ['select-cohorts', campaign["id"], cohort["id"]])

        assert result.exit_code == 0
        assert "Deleted 1 cohorts" in result.output
        assert [row["id"] for row in use_store.select("micro_cohorts")] == [cohort["id"]]
        assert other["id"] not in result.output

    def test_select_cohorts_none_kept(self, runner, use_store, campaign, cohort):
        result = runner.invoke(main, ['select-cohorts', campaign["id"], 'unknown'])

        assert result.exit_code == 1
        assert "Please select at least one cohort" in result.output

    def test_save_with_pending_images(self, runner, use_store, campaign, creative):
        result = runner.invoke(main, ['save', campaign["id"]])

        assert result.exit_code == 1
        assert "1 creatives have no image yet" in result.output
        assert use_store.get("campaigns", campaign["id"])["status"] == "draft"

    def test_save(self, runner, use_store, campaign, creative):
        use_store.update("campaign_creatives", creative["id"], {"image_url": "https://img.example/1.png"})

        result = runner.invoke(main, ['save', campaign["id"]])

        assert result.exit_code == 0
        assert f"Campaign {campaign['id']} is now active" in result.output

    def test_show_json(self, runner, use_store, campaign, creative):
        result = runner.invoke(main, ['show', campaign["id"], '--json'])

        assert result.exit_code == 0
        loaded = json.loads(result.output)
        assert loaded["cohorts"][0]["creatives"][0]["headline"] == "Chase the Rain"

    def test_show_other_user(self, runner, use_store, campaign):
        result = runner.invoke(main, ['show', campaign["id"], '--user-id', 'user-2'])

        assert result.exit_code == 1
        assert "Campaign does not belong to this user" in result.output

    def test_list(self, runner, use_store, campaign):
        result = runner.invoke(main, ['list', 'user-1'])

        assert result.exit_code == 0
        assert campaign["id"] in result.output
        assert "Monsoon getaways" in result.output

        result = runner.invoke(main, ['list', 'user-2'])
        assert "No campaigns for user-2" in result.output

    @patch('cohortcraft.server.create_app')
    def test_serve(self, mock_create_app, runner):
        result = runner.invoke(main, ['serve', '--port', '9000'])

        assert result.exit_code == 0
        mock_create_app.return_value.run.assert_called_once_with(host="127.0.0.1", port=9000)
