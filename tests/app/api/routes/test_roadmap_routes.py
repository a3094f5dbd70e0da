import logging
from unittest.mock import patch

from bs4 import BeautifulSoup

from careerflow.app.core.exceptions import PersistenceError
from careerflow.app.models.skill_gap_roadmap import SkillGapRoadmap

log = logging.getLogger(__name__)

JOB_DESCRIPTION = "Site reliability engineer running Kubernetes clusters and Terraform."
ROADMAP_MARKDOWN = (
    "Here is your plan.\n"
    "**Week 1: Foundations**\nLearn Linux. See https://kubernetes.io/docs/ for details.\n"
    "**Week 2: Automation**\nTerraform modules."
)


def test_create_roadmap_with_sections(client, patch_llm, db_session):
    patch_llm(
        {
            "learning_roadmap": ROADMAP_MARKDOWN,
            "sections": [
                {"title": "Week 1: Foundations", "content": "Learn Linux."},
                {"title": "Week 2: Automation", "content": "Terraform modules."},
            ],
        }
    )

    response = client.post(
        "/api/roadmaps",
        json={"target_role": "SRE", "job_description": JOB_DESCRIPTION},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["target_role"] == "SRE"
    assert data["learning_roadmap"] == ROADMAP_MARKDOWN
    assert [segment["title"] for segment in data["segments"]] == [
        "Week 1: Foundations",
        "Week 2: Automation",
    ]
    assert db_session.get(SkillGapRoadmap, data["id"]) is not None


def test_create_roadmap_segments_parsed_from_markdown(client, patch_llm):
    patch_llm({"learning_roadmap": ROADMAP_MARKDOWN})

    response = client.post(
        "/api/roadmaps",
        json={"target_role": "SRE", "job_description": JOB_DESCRIPTION},
    )

    titles = [segment["title"] for segment in response.json()["segments"]]
    assert "Week 1: Foundations" in titles
    assert "Week 2: Automation" in titles


def test_create_roadmap_htmx_accordion(client, patch_llm):
    patch_llm({"learning_roadmap": ROADMAP_MARKDOWN})

    response = client.post(
        "/api/roadmaps",
        json={"target_role": "SRE", "job_description": JOB_DESCRIPTION},
        headers={"HX-Request": "true"},
    )

    soup = BeautifulSoup(response.text, "html.parser")
    summaries = [summary.get_text(strip=True) for summary in soup.find_all("summary")]
    assert "Week 1: Foundations" in summaries
    link = soup.find("a", href="https://kubernetes.io/docs/")
    assert link is not None


def test_create_roadmap_short_target_role(client, patch_llm):
    prompts = patch_llm()

    response = client.post(
        "/api/roadmaps",
        json={"target_role": "QA", "job_description": JOB_DESCRIPTION},
    )

    assert response.status_code == 422
    assert response.json()["field"] == "target_role"
    assert prompts == []


def test_create_roadmap_persistence_error(client, patch_llm):
    patch_llm({"learning_roadmap": ROADMAP_MARKDOWN})

    with patch(
        "careerflow.app.api.routes.route_logic.history_store.append_record",
        side_effect=PersistenceError("The result could not be saved to your history."),
    ):
        response = client.post(
            "/api/roadmaps",
            json={"target_role": "SRE", "job_description": JOB_DESCRIPTION},
        )

    data = response.json()
    assert response.status_code == 200
    assert data["id"] is None
    assert data["persistence_error"] == "The result could not be saved to your history."
    assert data["segments"]


def test_list_and_delete_roadmaps(client, patch_llm):
    patch_llm({"learning_roadmap": ROADMAP_MARKDOWN})
    created = client.post(
        "/api/roadmaps",
        json={"target_role": "SRE", "job_description": JOB_DESCRIPTION},
    ).json()

    assert [roadmap["id"] for roadmap in client.get("/api/roadmaps").json()] == [created["id"]]

    response = client.request("DELETE", "/api/roadmaps", json={"ids": [created["id"]]})
    assert response.json() == {"deleted": 1}
