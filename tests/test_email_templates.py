from yogastudio.email_templates import class_booking_confirmation_template, newsletter_template, query_response_template


def test_preview_text_escapes_class_name():
    mjml = class_booking_confirmation_template("Maya", "Flow <Level 2>", "Sarah", "Mon 09:00")

    assert "<mj-preview>You&#x27;re booked for Flow &lt;Level 2&gt;</mj-preview>" in mjml
    assert "Flow <Level 2>" not in mjml


def test_response_preview_escapes_subject():
    mjml = query_response_template("Leo", "Hips </mj-preview> & knees", "Try pigeon pose.")
    assert "<mj-preview>Re: Hips &lt;/mj-preview&gt; &amp; knees</mj-preview>" in mjml


def test_newsletter_title_escaped_once():
    mjml = newsletter_template("Tips & <tricks>", "<p>Body</p>", "https://studio.example/unsubscribe")

    assert "<mj-title>Tips &amp; &lt;tricks&gt;</mj-title>" in mjml
    assert "&amp;amp;" not in mjml
    assert "<p>Body</p>" in mjml
