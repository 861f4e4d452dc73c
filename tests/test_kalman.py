import pytest

from balancebot.kalman import KalmanFilter


def test_default_noise_parameters():
    kf = KalmanFilter()
    assert kf.q_angle == pytest.approx(0.001)
    assert kf.q_bias == pytest.approx(0.003)
    assert kf.r_measure == pytest.approx(0.03)
    assert kf.angle == 0.0
    assert kf.bias == 0.0
    assert kf.p == [[0.0, 0.0], [0.0, 0.0]]


def test_set_angle_seeds_estimate():
    kf = KalmanFilter()
    kf.set_angle(12.5)
    assert kf.angle == 12.5


def test_steady_measurement_keeps_angle():
    kf = KalmanFilter()
    kf.set_angle(5.0)
    for _ in range(50):
        result = kf.update(5.0, 0.0, 0.02)
    assert result == pytest.approx(5.0)
    assert kf.bias == pytest.approx(0.0)


def test_single_step_moves_between_estimate_and_measurement():
    kf = KalmanFilter()
    result = kf.update(10.0, 0.0, 0.02)
    assert 0.0 < result < 10.0
    assert result == kf.angle


def test_converges_to_constant_measurement():
    kf = KalmanFilter()
    for _ in range(2000):
        result = kf.update(20.0, 0.0, 0.02)
    assert result == pytest.approx(20.0, abs=0.05)


def test_bias_tracks_constant_gyro_offset():
    kf = KalmanFilter()
    for _ in range(5000):
        kf.update(0.0, 1.5, 0.02)
    assert kf.bias == pytest.approx(1.5, abs=0.05)
    assert kf.angle == pytest.approx(0.0, abs=0.1)


def test_zero_dt_with_zero_covariance_leaves_angle():
    kf = KalmanFilter()
    kf.set_angle(3.0)
    result = kf.update(30.0, 100.0, 0.0)
    assert result == 3.0
    assert kf.k == [0.0, 0.0]


def test_covariance_stays_symmetric_and_positive():
    kf = KalmanFilter()
    for step in range(200):
        kf.update(float(step % 7), 0.3, 0.02)
    assert kf.p[0][1] == pytest.approx(kf.p[1][0])
    assert kf.p[0][0] > 0.0
    assert kf.p[1][1] > 0.0


def test_innovation_records_measurement_residual():
    kf = KalmanFilter()
    kf.set_angle(2.0)
    kf.update(7.0, 0.0, 0.0)
    assert kf.y == pytest.approx(5.0)