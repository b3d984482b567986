import pytest

from wealthwise.core.exceptions import InvalidInputError, RiskAnalysisError
from wealthwise.core.payment_analyzer import PaymentAnalyzer

from conftest import FakeAnthropic, make_llm


def test_analyze_returns_score_and_reasoning():
    fake = FakeAnthropic({'risk_score': 15, 'reasoning': 'Small everyday amount'})
    analyzer = PaymentAnalyzer(make_llm())
    analyzer.llm_client.client = fake

    assessment = analyzer.analyze('u1', 42.5, 'usd')

    assert assessment.risk_score == 15
    assert assessment.reasoning == 'Small everyday amount'
    assert not assessment.is_high_risk

    prompt = fake.messages.calls[0]['messages'][0]['content']
    assert '- User ID: u1' in prompt
    assert '- Amount: 42.5' in prompt
    assert '- Currency: usd' in prompt
    assert 'above 80' in prompt


@pytest.mark.parametrize('score, high_risk', [(80, False), (80.5, True), (99, True)])
def test_high_risk_is_strictly_above_80(score, high_risk):
    analyzer = PaymentAnalyzer(make_llm({'risk_score': score, 'reasoning': ''}))
    assert analyzer.analyze('u1', 5000, 'usd').is_high_risk is high_risk


@pytest.mark.parametrize('score, expected', [(-5, 0), (140, 100)])
def test_out_of_range_score_is_clamped(score, expected):
    analyzer = PaymentAnalyzer(make_llm({'risk_score': score}))
    assessment = analyzer.analyze('u1', 10, 'usd')
    assert assessment.risk_score == expected
    assert assessment.reasoning == ''


@pytest.mark.parametrize('reply', [
    {'reasoning': 'no score'},
    {'risk_score': 'high'},
    {'risk_score': True},
    {'risk_score': float('nan')},
])
def test_unusable_score_raises(reply):
    analyzer = PaymentAnalyzer(make_llm(reply))
    with pytest.raises(RiskAnalysisError):
        analyzer.analyze('u1', 10, 'usd')


def test_remote_failure_raises():
    analyzer = PaymentAnalyzer(make_llm(RuntimeError('timeout')))
    with pytest.raises(RiskAnalysisError, match='timeout'):
        analyzer.analyze('u1', 10, 'usd')


@pytest.mark.parametrize('uid, amount, currency', [
    ('', 10, 'usd'),
    ('u1', 0, 'usd'),
    ('u1', -3, 'usd'),
    ('u1', float('inf'), 'usd'),
    ('u1', '10', 'usd'),
    ('u1', 10, ' '),
])
def test_bad_input_rejected_without_model_call(uid, amount, currency):
    fake = FakeAnthropic()
    analyzer = PaymentAnalyzer(make_llm())
    analyzer.llm_client.client = fake

    with pytest.raises(InvalidInputError):
        analyzer.analyze(uid, amount, currency)
    assert fake.messages.calls == []
