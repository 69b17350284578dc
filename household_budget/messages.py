"""User-facing message catalog.

Errors and success responses carry a message key; the text is chosen from the
client's ``Accept-Language`` header, English by default.
"""
from flask import has_request_context, request

DEFAULT_LANGUAGE = "en"

MESSAGES = {
    # validation
    "validation_failed": {
        "en": "Invalid input data",
        "ja": "入力データが無効です",
    },
    "password_too_short": {
        "en": "Password must be at least 8 characters long",
        "ja": "パスワードは8文字以上で入力してください",
    },
    "account_id_length": {
        "en": "Account ID must be between 3 and 20 characters long",
        "ja": "アカウントIDは3文字以上20文字以下で入力してください",
    },
    "name_required": {
        "en": "Name is required and must be at most 100 characters long",
        "ja": "ユーザー名は必須です（100文字以内）",
    },
    "invalid_period": {
        "en": "Year must be between 2000 and 2100 and month between 1 and 12",
        "ja": "年は2000〜2100、月は1〜12で指定してください",
    },
    "payer_is_requester": {
        "en": "Requester and payer must be different users",
        "ja": "請求者と支払者は異なるユーザーである必要があります",
    },
    "payer_not_found": {
        "en": "The selected payer does not exist",
        "ja": "指定された支払者が存在しません",
    },
    "invalid_item": {
        "en": "Each item needs a name of at most 255 characters and a numeric amount",
        "ja": "項目名（255文字以内）と数値の金額を入力してください",
    },
    "invalid_input": {
        "en": "Invalid input value",
        "ja": "無効な入力値です",
    },
    "request_too_large": {
        "en": "Request body is too large",
        "ja": "リクエストサイズが大きすぎます",
    },
    # authentication
    "invalid_credentials": {
        "en": "Invalid account ID or password",
        "ja": "認証情報が無効です",
    },
    "authentication_required": {
        "en": "Authorization header is required",
        "ja": "認証ヘッダーが必要です",
    },
    "invalid_token": {
        "en": "Invalid token",
        "ja": "無効なトークンです",
    },
    "token_expired": {
        "en": "Token has expired, please log in again",
        "ja": "トークンの有効期限が切れています。再度ログインしてください。",
    },
    "token_revoked": {
        "en": "This token has been revoked, please log in again",
        "ja": "このトークンは無効です。再度ログインしてください。",
    },
    # authorization
    "access_forbidden": {
        "en": "You do not have permission to perform this action",
        "ja": "この操作を行う権限がありません",
    },
    "not_bill_requester": {
        "en": "Only the requester of this bill can do that",
        "ja": "この操作は請求者のみが行えます",
    },
    "not_bill_payer": {
        "en": "Only the payer of this bill can do that",
        "ja": "この操作は支払者のみが行えます",
    },
    "bill_not_pending": {
        "en": "This bill is already confirmed and can no longer be changed",
        "ja": "確定済みの家計簿は変更できません",
    },
    "bill_not_requested": {
        "en": "This bill is not awaiting payment",
        "ja": "家計簿が請求中状態ではありません",
    },
    "invalid_csrf_token": {
        "en": "Invalid CSRF token, please reload the page and try again",
        "ja": "CSRF トークンが無効です。ページを更新してやり直してください。",
    },
    # not found
    "user_not_found": {
        "en": "User not found",
        "ja": "ユーザーが見つかりません",
    },
    "bill_not_found": {
        "en": "Bill not found",
        "ja": "家計簿が見つかりません",
    },
    "resource_not_found": {
        "en": "The requested resource was not found",
        "ja": "要求されたリソースが見つかりません",
    },
    # conflict
    "account_id_taken": {
        "en": "This account ID is already in use",
        "ja": "このアカウントIDは既に使用されています",
    },
    "bill_exists": {
        "en": "A bill for this year and month already exists",
        "ja": "指定された年月の家計簿は既に存在します",
    },
    # rate limit
    "rate_limited": {
        "en": "Too many requests, please try again later",
        "ja": "リクエストが多すぎます。しばらくしてから再試行してください。",
    },
    # infrastructure
    "token_generation_failed": {
        "en": "Could not generate a token",
        "ja": "トークンを生成できませんでした",
    },
    "password_processing_failed": {
        "en": "Failed to process the password",
        "ja": "パスワードの処理に失敗しました",
    },
    "database_error": {
        "en": "A database error occurred",
        "ja": "データベースエラーが発生しました",
    },
    "internal_error": {
        "en": "An internal server error occurred",
        "ja": "内部サーバーエラーが発生しました",
    },
    # success
    "bill_requested": {
        "en": "The bill has been sent to the payer",
        "ja": "家計簿の請求が確定しました",
    },
    "bill_paid": {
        "en": "The payment has been confirmed",
        "ja": "支払いが確定しました",
    },
    "bill_deleted": {
        "en": "The bill has been deleted",
        "ja": "家計簿を削除しました",
    },
    "logged_out": {
        "en": "Logged out",
        "ja": "ログアウトしました",
    },
    "logged_out_all": {
        "en": "Logged out from all devices",
        "ja": "全デバイスからログアウトしました",
    },
    "service_running": {
        "en": "Household budget API is running",
        "ja": "家計簿API稼働中",
    },
}

SUPPORTED_LANGUAGES = sorted({lang for texts in MESSAGES.values() for lang in texts})


def current_language():
    if not has_request_context():
        return DEFAULT_LANGUAGE
    return request.accept_languages.best_match(SUPPORTED_LANGUAGES, default=DEFAULT_LANGUAGE)


def localize(key, language=None):
    """Return the text for ``key``; unknown keys are returned unchanged."""
    texts = MESSAGES.get(key)
    if texts is None:
        return key
    language = language or current_language()
    return texts.get(language) or texts[DEFAULT_LANGUAGE]
