"""Korean/Japanese message tables and request language resolution."""
from typing import Optional

from app.core.config import settings
from app.core.constants import Language

MESSAGES = {
    "error.generic": {
        "ko": "오류가 발생했습니다.",
        "ja": "エラーが発生しました。",
    },
    "error.try_again": {
        "ko": "다시 시도해주세요.",
        "ja": "もう一度お試しください。",
    },
    "error.not_found": {
        "ko": "요청을 찾을 수 없습니다.",
        "ja": "リクエストが見つかりません。",
    },
    "error.admin_required": {
        "ko": "관리자 권한이 필요합니다.",
        "ja": "管理者権限が必要です。",
    },
    "error.too_many_requests": {
        "ko": "요청이 너무 많습니다. 잠시 후 다시 시도해주세요.",
        "ja": "リクエストが多すぎます。しばらくしてからお試しください。",
    },
    "onboarding.age_restriction": {
        "ko": "만 {age}세 이상만 가입할 수 있습니다.",
        "ja": "{age}歳以上の方のみ登録できます。",
    },
    "onboarding.photos_required": {
        "ko": "사진을 최소 {count}장 업로드해주세요.",
        "ja": "写真を最低{count}枚アップロードしてください。",
    },
    "onboarding.photo_limit": {
        "ko": "사진은 최대 {count}장까지 업로드할 수 있습니다.",
        "ja": "写真は最大{count}枚までアップロードできます。",
    },
    "onboarding.invalid_photo": {
        "ko": "업로드하지 않은 사진이 포함되어 있습니다.",
        "ja": "アップロードされていない写真が含まれています。",
    },
    "onboarding.photo_not_found": {
        "ko": "사진을 찾을 수 없습니다.",
        "ja": "写真が見つかりません。",
    },
    "onboarding.invalid_doc_type": {
        "ko": "선택한 국적에서 사용할 수 없는 신분증 종류입니다.",
        "ja": "選択した国籍では使用できない身分証明書の種類です。",
    },
    "onboarding.invalid_interest": {
        "ko": "선택할 수 없는 관심사가 포함되어 있습니다.",
        "ja": "選択できない興味が含まれています。",
    },
    "onboarding.image_required": {
        "ko": "신분증 이미지를 업로드해주세요.",
        "ja": "身分証明書の画像をアップロードしてください。",
    },
    "onboarding.required_field": {
        "ko": "필수 항목을 입력해주세요: {field}",
        "ja": "必須項目を入力してください: {field}",
    },
    "admin.rejection_reason_required": {
        "ko": "거부 사유를 입력해주세요.",
        "ja": "拒否理由を入力してください。",
    },
    "admin.already_decided": {
        "ko": "이미 처리된 요청입니다.",
        "ja": "既に処理されたリクエストです。",
    },
    "verify.already_verified": {
        "ko": "이미 인증된 사용자입니다.",
        "ja": "既に認証済みのユーザーです。",
    },
    "access.chat_requires_verification": {
        "ko": "채팅은 신분증 인증 후 이용할 수 있습니다.",
        "ja": "チャットは本人確認後に利用できます。",
    },
    "notify.verify_passed.title": {
        "ko": "신분증 인증 완료",
        "ja": "本人確認完了",
    },
    "notify.verify_passed.body": {
        "ko": "신분증 인증이 완료되었습니다. 이제 채팅 기능을 사용할 수 있습니다.",
        "ja": "本人確認が完了しました。チャット機能が使えるようになりました。",
    },
    "notify.verify_rejected.title": {
        "ko": "신분증 인증 거부",
        "ja": "本人確認拒否",
    },
    "notify.profile_photo_approved.title": {
        "ko": "프로필 사진 승인",
        "ja": "プロフィール写真承認",
    },
    "notify.profile_photo_approved.body": {
        "ko": "프로필 사진이 승인되었습니다.",
        "ja": "プロフィール写真が承認されました。",
    },
    "notify.profile_photo_rejected.title": {
        "ko": "프로필 사진 거부",
        "ja": "プロフィール写真拒否",
    },
    "notify.bio_approved.title": {
        "ko": "자기소개 승인 완료",
        "ja": "自己紹介承認完了",
    },
    "notify.bio_approved.body": {
        "ko": "회원님의 자기소개가 승인되었습니다.",
        "ja": "自己紹介が承認されました。",
    },
    "notify.bio_rejected.title": {
        "ko": "자기소개 거부",
        "ja": "自己紹介拒否",
    },
    "profile.bio_pending_review": {
        "ko": "자기소개 변경 요청이 접수되었습니다. 승인 후 반영됩니다.",
        "ja": "自己紹介の変更リクエストを受け付けました。承認後に反映されます。",
    },
    "profile.photo_pending_review": {
        "ko": "프로필 사진 변경 요청이 접수되었습니다. 승인 후 반영됩니다.",
        "ja": "プロフィール写真の変更リクエストを受け付けました。承認後に反映されます。",
    },
    "notify.rejection_reason": {
        "ko": "사유: {reason}",
        "ja": "理由: {reason}",
    },
}


def normalize_language(value: Optional[str]) -> str:
    """Map a header value such as ``ja-JP,ja;q=0.9`` onto ``ko`` or ``ja``."""
    if value:
        for part in value.split(","):
            code = part.split(";")[0].strip().lower()[:2]
            if code in (Language.KO.value, Language.JA.value):
                return code
    return settings.DEFAULT_LANGUAGE


def t(key: str, language: str, **params) -> str:
    entry = MESSAGES.get(key)
    if not entry:
        return key
    text = entry.get(language) or entry[settings.DEFAULT_LANGUAGE]
    return text.format(**params) if params else text
