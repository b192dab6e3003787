"""Onboarding wizard tests: service-level sequencing and the HTTP surface."""
import json
from pathlib import Path

import pytest

from app.core.constants import DocType, Gender, Language, Nationality, Proficiency
from app.models.profile import LanguageSkill, ProfilePhoto, UserInterest
from app.models.verification import IdentityVerification
from app.services.onboarding_service import OnboardingWizard
from app.services.verification_service import IncomingFile
from app.utils.errors import ValidationFailedError
from helpers import PNG_BYTES, png, years_ago


def _image(name="photo.png"):
    return IncomingFile(filename=name, content_type="image/png", data=PNG_BYTES)


def _profile(nationality="KR", age=25, photos=None, **overrides):
    profile = {
        "nationality": nationality,
        "name": "민지",
        "gender": "female",
        "birthdate": years_ago(age).isoformat(),
        "city": "Seoul",
        "photos": photos or [],
        "bio": "안녕하세요",
    }
    profile.update(overrides)
    return profile


async def _uploaded_photos(async_client, headers):
    r = await async_client.post("/onboarding/photos", files=[("files", png())], headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]["photos"]


# ---------------------------------------------------------------------------
# Wizard (service level)
# ---------------------------------------------------------------------------

def test_wizard_full_flow_submits_verification(db_session, make_user, upload_dir):
    user, _ = make_user(country_code=None, nickname=None)
    wizard = OnboardingWizard(db_session, user, language="ja")

    assert wizard.select_nationality(Nationality.JP) == 2
    accepted = wizard.add_photos([_image(), IncomingFile("notes.txt", "text/plain", b"hello")])
    assert len(accepted) == 1
    assert wizard.complete_photos() == 3
    assert wizard.submit_basic_info("Yui", Gender.FEMALE, years_ago(18), "Tokyo") == 4
    assert wizard.submit_questions(
        job="Designer",
        education=None,
        bio="よろしく",
        interests=["映画", "旅行"],
        language_skills={Language.KO: Proficiency.BEGINNER, Language.JA: Proficiency.NATIVE},
    ) == 5

    verification_id = wizard.submit_verification(DocType.MY_NUMBER_CARD, _image("card.png"))

    db_session.refresh(user)
    assert wizard.finished
    assert user.nickname == "Yui"
    assert user.country_code == "JP"
    assert user.bio == "よろしく"
    assert user.onboarding_step == 5
    assert user.onboarding_completed is False
    assert user.is_verified is False
    assert [p.url for p in user.photos] == [accepted[0].url]

    record = db_session.query(IdentityVerification).filter(IdentityVerification.id == verification_id).one()
    assert record.status == "submitted"
    assert record.doc_type == "my_number_card"
    assert record.id_front_path.startswith(f"{user.id}/")
    assert (Path(upload_dir) / "identity_documents" / record.id_front_path).exists()


def test_wizard_requires_minimum_photos(db_session, make_user):
    user, _ = make_user(country_code=None)
    wizard = OnboardingWizard(db_session, user)
    wizard.select_nationality(Nationality.KR)

    with pytest.raises(ValidationFailedError) as exc:
        wizard.complete_photos()
    assert exc.value.status_code == 422
    assert wizard.step == 2


def test_age_gate_uses_nationality_not_language(db_session, make_user):
    user, _ = make_user(country_code=None, nickname=None)
    # Japanese-speaking UI, Korean nationality: Korean minimum applies
    wizard = OnboardingWizard(db_session, user, language="ja")
    wizard.select_nationality(Nationality.KR)
    wizard.add_photos([_image()])
    wizard.complete_photos()

    with pytest.raises(ValidationFailedError) as exc:
        wizard.submit_basic_info("Jun", Gender.MALE, years_ago(18), "Busan")
    assert "19" in exc.value.detail
    assert "歳" in exc.value.detail
    assert wizard.step == 3

    db_session.refresh(user)
    assert user.nickname is None
    assert user.birthdate is None

    assert wizard.submit_basic_info("Jun", Gender.MALE, years_ago(19), "Busan") == 4


def test_age_gate_boundary_day(db_session, make_user):
    user, _ = make_user(country_code=None)
    wizard = OnboardingWizard(db_session, user)
    wizard.select_nationality(Nationality.JP)
    wizard.add_photos([_image()])
    wizard.complete_photos()

    # Turns 18 tomorrow
    with pytest.raises(ValidationFailedError):
        wizard.submit_basic_info("Ren", Gender.MALE, years_ago(18, days=1), "Osaka")


def test_skip_verification_completes_without_verifying(db_session, make_user):
    user, _ = make_user(country_code=None)
    wizard = OnboardingWizard(db_session, user)
    wizard.select_nationality(Nationality.KR)
    wizard.add_photos([_image()])
    wizard.complete_photos()
    wizard.submit_basic_info("Seo", Gender.FEMALE, years_ago(30), "Incheon")
    wizard.submit_questions(None, None, "hi", [], {})

    wizard.skip_verification()

    db_session.refresh(user)
    assert user.onboarding_completed is True
    assert user.is_verified is False
    assert user.nickname == "Seo"
    assert db_session.query(IdentityVerification).filter(IdentityVerification.user_id == user.id).count() == 0


def test_go_back_persists_lower_step(db_session, make_user):
    user, _ = make_user(country_code=None)
    wizard = OnboardingWizard(db_session, user)
    wizard.select_nationality(Nationality.KR)

    assert wizard.go_back() == 1
    db_session.refresh(user)
    assert user.onboarding_step == 1


def test_remove_photo_out_of_range_stays_on_photo_step(db_session, make_user):
    user, _ = make_user(country_code=None)
    wizard = OnboardingWizard(db_session, user, language="ja")
    wizard.select_nationality(Nationality.JP)
    wizard.add_photos([_image()])

    with pytest.raises(ValidationFailedError) as exc:
        wizard.remove_photo(3)
    assert exc.value.detail == "写真が見つかりません。"
    assert wizard.step == 2
    assert len(wizard.draft.photos) == 1


def test_remove_photo_deletes_stored_file(db_session, make_user, upload_dir):
    user, _ = make_user(country_code=None)
    wizard = OnboardingWizard(db_session, user)
    wizard.select_nationality(Nationality.KR)
    accepted = wizard.add_photos([_image("a.png"), _image("b.png")])

    wizard.remove_photo(0)

    assert [p.storage_path for p in wizard.draft.photos] == [accepted[1].storage_path]
    assert not (Path(upload_dir) / "profile_photos" / accepted[0].storage_path).exists()
    assert wizard.complete_photos() == 3


# ---------------------------------------------------------------------------
# HTTP surface
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_status_endpoint(async_client, make_user, auth_headers):
    _, token = make_user(country_code=None)
    r = await async_client.get("/onboarding/status", headers=auth_headers(token))
    assert r.status_code == 200, r.text
    assert r.json()["data"]["onboarding_step"] == 1
    assert r.json()["data"]["onboarding_completed"] is False


@pytest.mark.asyncio
async def test_basic_info_age_gate_localized(async_client, make_user, auth_headers):
    _, token = make_user(country_code=None)
    payload = {
        "nationality": "KR",
        "name": "Jun",
        "gender": "male",
        "birthdate": years_ago(18).isoformat(),
        "city": "Seoul",
    }

    r = await async_client.post("/onboarding/basic-info", json=payload, headers=auth_headers(token, "ko"))
    assert r.status_code == 422
    assert "만 19세" in r.json()["detail"]

    payload["nationality"] = "JP"
    r = await async_client.post("/onboarding/basic-info", json=payload, headers=auth_headers(token, "ko"))
    assert r.status_code == 200, r.text


@pytest.mark.asyncio
async def test_photo_upload_filters_non_images(async_client, make_user, auth_headers):
    _, token = make_user(country_code=None)
    files = [
        ("files", png("a.png")),
        ("files", ("notes.txt", b"not an image", "text/plain")),
    ]
    r = await async_client.post("/onboarding/photos", files=files, headers=auth_headers(token))
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert len(data["photos"]) == 1
    assert data["skipped"] == 1
    assert data["photos"][0]["url"].endswith(".png")


@pytest.mark.asyncio
async def test_photo_upload_limit_counts_stored_photos(async_client, make_user, auth_headers, upload_dir):
    user, token = make_user(country_code=None)
    batch = [("files", png(f"{i}.png")) for i in range(4)]

    r = await async_client.post("/onboarding/photos", files=batch, headers=auth_headers(token))
    assert len(r.json()["data"]["photos"]) == 4
    r = await async_client.post("/onboarding/photos", files=batch, headers=auth_headers(token))
    assert len(r.json()["data"]["photos"]) == 2

    r = await async_client.post("/onboarding/photos", files=batch, headers=auth_headers(token, "ko"))
    assert r.status_code == 422
    assert r.json()["detail"] == "사진은 최대 6장까지 업로드할 수 있습니다."

    stored = list((Path(upload_dir) / "profile_photos" / str(user.id)).rglob("*.png"))
    assert len(stored) == 6


@pytest.mark.asyncio
async def test_deleting_photo_frees_a_slot(async_client, make_user, auth_headers, upload_dir):
    user, token = make_user(country_code=None)
    batch = [("files", png(f"{i}.png")) for i in range(6)]
    r = await async_client.post("/onboarding/photos", files=batch, headers=auth_headers(token))
    first = r.json()["data"]["photos"][0]["storage_path"]

    r = await async_client.delete(
        "/onboarding/photos", params={"storage_path": first}, headers=auth_headers(token)
    )
    assert r.status_code == 200, r.text
    assert not (Path(upload_dir) / "profile_photos" / first).exists()

    r = await async_client.post("/onboarding/photos", files=[("files", png())], headers=auth_headers(token))
    assert r.status_code == 201, r.text
    assert len(r.json()["data"]["photos"]) == 1


@pytest.mark.asyncio
async def test_cannot_delete_another_users_photo(async_client, make_user, auth_headers, upload_dir):
    _, owner_token = make_user(country_code=None)
    _, other_token = make_user(country_code=None)
    r = await async_client.post("/onboarding/photos", files=[("files", png())], headers=auth_headers(owner_token))
    path = r.json()["data"]["photos"][0]["storage_path"]

    r = await async_client.delete(
        "/onboarding/photos", params={"storage_path": path}, headers=auth_headers(other_token)
    )
    assert r.status_code == 422
    assert (Path(upload_dir) / "profile_photos" / path).exists()


@pytest.mark.asyncio
async def test_questions_write_through(async_client, db_session, make_user, auth_headers):
    user, token = make_user(country_code=None)
    payload = {
        "nationality": "KR",
        "job": "Engineer",
        "education": "bachelors",
        "bio": "반가워요",
        "interests": ["영화", "여행"],
        "language_skills": {"ko": "native", "ja": "intermediate"},
    }
    r = await async_client.post("/onboarding/questions", json=payload, headers=auth_headers(token))
    assert r.status_code == 200, r.text

    db_session.refresh(user)
    assert user.bio == "반가워요"
    assert user.onboarding_step == 5
    assert {i.interest for i in db_session.query(UserInterest).filter(UserInterest.user_id == user.id)} == {"영화", "여행"}
    skills = {s.language_code: s.proficiency for s in db_session.query(LanguageSkill).filter(LanguageSkill.user_id == user.id)}
    assert skills == {"ko": "native", "ja": "intermediate"}


@pytest.mark.asyncio
async def test_questions_reject_foreign_interest(async_client, make_user, auth_headers):
    _, token = make_user(country_code=None)
    payload = {"nationality": "KR", "interests": ["映画"], "language_skills": {}}
    r = await async_client.post("/onboarding/questions", json=payload, headers=auth_headers(token))
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_verification_step_commits_profile_and_submits(async_client, db_session, make_user, auth_headers):
    user, token = make_user(country_code=None, nickname=None)
    upload = await async_client.post("/onboarding/photos", files=[("files", png())], headers=auth_headers(token))
    photos = upload.json()["data"]["photos"]

    r = await async_client.post(
        "/onboarding/verification",
        data={"profile": json.dumps(_profile(photos=photos)), "doc_type": "passport"},
        files={"document": png("passport.png")},
        headers=auth_headers(token),
    )
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["onboarding_step"] == 5
    assert data["onboarding_completed"] is False

    db_session.refresh(user)
    assert user.nickname == "민지"
    assert user.country_code == "KR"
    assert user.city == "Seoul"
    assert user.is_verified is False
    assert db_session.query(ProfilePhoto).filter(ProfilePhoto.user_id == user.id).count() == 1

    record = db_session.query(IdentityVerification).filter(IdentityVerification.id == data["verification_id"]).one()
    assert record.status == "submitted"
    assert record.country_code == "KR"


@pytest.mark.asyncio
async def test_verification_rejects_doc_type_not_offered(async_client, db_session, make_user, auth_headers):
    user, token = make_user(country_code=None, nickname=None)
    photos = await _uploaded_photos(async_client, auth_headers(token))
    r = await async_client.post(
        "/onboarding/verification",
        data={"profile": json.dumps(_profile(photos=photos)), "doc_type": "my_number_card"},
        files={"document": png("card.png")},
        headers=auth_headers(token, "ko"),
    )
    assert r.status_code == 422
    assert r.json()["detail"] == "선택한 국적에서 사용할 수 없는 신분증 종류입니다."

    db_session.refresh(user)
    assert user.nickname is None
    assert db_session.query(IdentityVerification).filter(IdentityVerification.user_id == user.id).count() == 0


@pytest.mark.asyncio
async def test_verification_requires_document(async_client, db_session, make_user, auth_headers):
    user, token = make_user(country_code=None, nickname=None)
    photos = await _uploaded_photos(async_client, auth_headers(token))
    r = await async_client.post(
        "/onboarding/verification",
        data={"profile": json.dumps(_profile(photos=photos)), "doc_type": "passport"},
        headers=auth_headers(token, "ja"),
    )
    assert r.status_code == 422
    assert r.json()["detail"] == "身分証明書の画像をアップロードしてください。"
    db_session.refresh(user)
    assert user.onboarding_step == 1


@pytest.mark.asyncio
async def test_skip_verification_endpoint(async_client, db_session, make_user, auth_headers):
    user, token = make_user(country_code=None)
    upload = await async_client.post("/onboarding/photos", files=[("files", png())], headers=auth_headers(token))
    photos = upload.json()["data"]["photos"]

    r = await async_client.post(
        "/onboarding/skip-verification",
        json=_profile(nationality="JP", age=18, photos=photos, name="Aoi", city="Kyoto"),
        headers=auth_headers(token),
    )
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["onboarding_completed"] is True
    assert data["is_verified"] is False
    assert data["country_code"] == "JP"


@pytest.mark.asyncio
async def test_terminal_step_requires_minimum_photos(async_client, db_session, make_user, auth_headers):
    user, token = make_user(country_code=None, nickname=None)

    r = await async_client.post(
        "/onboarding/verification",
        data={"profile": json.dumps(_profile(photos=[])), "doc_type": "passport"},
        files={"document": png("passport.png")},
        headers=auth_headers(token, "ko"),
    )
    assert r.status_code == 422
    assert r.json()["detail"] == "사진을 최소 1장 업로드해주세요."

    r = await async_client.post(
        "/onboarding/skip-verification", json=_profile(photos=[]), headers=auth_headers(token)
    )
    assert r.status_code == 422

    db_session.refresh(user)
    assert user.nickname is None
    assert user.onboarding_completed is False
    assert db_session.query(IdentityVerification).filter(IdentityVerification.user_id == user.id).count() == 0


@pytest.mark.asyncio
async def test_terminal_step_rejects_photos_not_uploaded_by_user(
    async_client, db_session, make_user, auth_headers, upload_dir
):
    owner, owner_token = make_user(country_code=None)
    other, other_token = make_user(country_code=None, nickname=None)
    r = await async_client.post("/onboarding/photos", files=[("files", png())], headers=auth_headers(owner_token))
    owner_photo = r.json()["data"]["photos"][0]
    r = await async_client.post("/onboarding/photos", files=[("files", png())], headers=auth_headers(other_token))
    own_photo = r.json()["data"]["photos"][0]

    forged = [
        [own_photo, owner_photo],
        [own_photo, {"url": "https://evil.example/x.png", "storage_path": "../identity_documents/1/x.png"}],
    ]
    for photos in forged:
        r = await async_client.post(
            "/onboarding/skip-verification",
            json=_profile(photos=photos),
            headers=auth_headers(other_token, "ja"),
        )
        assert r.status_code == 422
        assert r.json()["detail"] == "アップロードされていない写真が含まれています。"

    db_session.refresh(other)
    assert other.onboarding_completed is False
    assert db_session.query(ProfilePhoto).filter(ProfilePhoto.user_id == other.id).count() == 0
    assert (Path(upload_dir) / "profile_photos" / owner_photo["storage_path"]).exists()


@pytest.mark.asyncio
async def test_terminal_step_ignores_client_photo_url(async_client, db_session, make_user, auth_headers):
    user, token = make_user(country_code=None)
    r = await async_client.post("/onboarding/photos", files=[("files", png())], headers=auth_headers(token))
    photo = r.json()["data"]["photos"][0]

    r = await async_client.post(
        "/onboarding/skip-verification",
        json=_profile(photos=[{"url": "https://evil.example/x.png", "storage_path": photo["storage_path"]}]),
        headers=auth_headers(token),
    )
    assert r.status_code == 200, r.text

    rows = db_session.query(ProfilePhoto).filter(ProfilePhoto.user_id == user.id).all()
    assert [row.storage_path for row in rows] == [photo["storage_path"]]
    assert rows[0].url == photo["url"]
