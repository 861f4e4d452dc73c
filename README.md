# balancebot

The control core of a two-wheeled self-balancing robot, in plain Python
with no dependencies beyond the standard library. It holds the parts of
the robot that are pure logic, so they can be simulated, tuned and tested
away from the hardware.

## Modules

- `balancebot.kalman` – `KalmanFilter`, a one-axis filter that fuses an
  accelerometer angle with a gyroscope rate and estimates the gyro bias.
- `balancebot.pid` – `PIDController` (output limits, integral clamping,
  no derivative kick on the first call) and `BalancePID`, a cascade in
  which a velocity loop sets the target tilt and a pitch loop produces the
  motor output.
- `balancebot.motor` – `MotorControl` for one motor behind an H-bridge;
  `set_speed` clamps to ±255 and returns a `MotorOutput` (two direction
  pin levels and a PWM duty), passing it to an optional `driver` callable.
- `balancebot.servo` – `ServoStandup`, the stand-up sequence
  (`StandupState.EXTENDING`, `PUSHING`, `RETRACTING`, `COMPLETE`), with
  `pulse_width_us` and `servo_duty` for the servo timing.
- `balancebot.protocol` – the binary message format: an 8-byte
  little-endian `Header`, `MoveCommand`, `StatusResponse` and
  `ConfigPayload` payloads, a CRC-16 `calculate_checksum`, and
  `encode_message` / `decode_message` / `validate_message` with the
  `build_move_command`, `build_status_response` and `build_error_message`
  helpers.
- `balancebot.ble_controller` – `BleController`, which turns received
  packets into a `RemoteCommand` and encodes status notifications.
- `balancebot.config_manager` – `ConfigManager` with `TuningParams`,
  persistence to any `MutableMapping[str, bytes]`, and a small text
  command language (`SET <id> <value>`, `GET <id>`, `RESET`, `SAVE`).
- `balancebot.error_recovery` – `ErrorRecovery`: component start-up with
  retries and priority-based failure handling; a critical failure enters
  safe mode by raising `SafeModeRestart`.
- `balancebot.state_machine` – `RobotState` and the pure transition
  function `next_state`.
- `balancebot.drive` – `motor_speeds` and `drive_motors`, mixing the
  balance output with the remote turn command.
- `balancebot.telemetry` – `status_message` and `debug_lines`, the text
  status reports.
- `balancebot.robot` – `Robot`, which ties motors, servo, remote link,
  Kalman filter and balance controller together.
- `balancebot.settings` – default pins, gains, thresholds and timings.

## Filtering an angle

```python
from balancebot.kalman import KalmanFilter

kf = KalmanFilter()
kf.set_angle(0.0)
samples = [(1.2, 0.5), (1.4, 0.7), (1.3, -0.1)]   # (degrees, degrees per second)
for accel_angle, gyro_rate in samples:
    angle = kf.update(accel_angle, gyro_rate, 0.02)
```

## Balancing

```python
from balancebot.pid import BalancePID

controller = BalancePID()
controller.set_target_velocity(0.0)
motor_output = controller.compute_balance(2.0, 0.0, 0.0, 0.02)
```

The first call of each loop only records the error and returns 0.
`compute_balance` returns 0 once the tilt exceeds `max_tilt_angle`, so
the motors stop when the robot has fallen. `reset()` clears both loops.

## Messages on the wire

```python
from balancebot.protocol import (
    CommandFlag,
    build_move_command,
    decode_message,
    encode_message,
)

message = build_move_command(1, -20, 50, CommandFlag.BALANCE, 7)
packet = encode_message(message)
assert decode_message(packet) == message
assert message.move_command.turn == -20
```

Decoding raises `ProtocolError` for a packet that is too short or
truncated, or has a wrong start marker, version, length or checksum.

## Remote commands

```python
from balancebot.ble_controller import BleController

sent = []
ble = BleController("BalanceBot", send=lambda conn, char, data, notify: sent.append(data))
ble.on_connected(conn_handle=1)
ble.on_data_received(ble.command_char_handle, packet)   # True for a valid move command
ble.command                                             # the clamped RemoteCommand
ble.send_status(angle=1.5, velocity=0.0, battery_voltage=4.0)
```

`send_status` raises `ConnectionError` when no client is connected.

## Tuning parameters

```python
from balancebot.config_manager import ConfigManager, ParamId

store = {}
config = ConfigManager(store)
config.handle_command("SET 0 42.5")                 # also written to the store
assert config.get_param(ParamId.BALANCE_KP) == 42.5
assert config.handle_command("GET 0") == 42.5
print(config.status_string())
```

Each parameter is stored as a 4-byte little-endian float under a short
key such as `"bal_kp"`. Bad commands and unknown ids raise `ConfigError`.

## Stand-up sequence

```python
from balancebot.servo import ServoStandup, StandupState

now = [0]
servo = ServoStandup(pin=19, channel=2, extend_angle=90, retract_angle=0,
                     clock=lambda: now[0])
servo.request_standup()
servo.update()                     # StandupState.EXTENDING
for now[0] in (1000, 3000, 4000, 4500):
    servo.update()                 # PUSHING, RETRACTING, COMPLETE, IDLE
assert not servo.is_standing_up()
```

The default phase times are 1000, 2000 and 1000 ms, followed by a 500 ms
hold; `set_timings` and `set_angles` change them. Without a `clock` the
monotonic clock is used.

## The control loop

`Robot(left_motor, right_motor, servo, ble=None, params=None)` starts in
`RobotState.IDLE`. Each tick, `balance_step(angle, gyro_rate, velocity,
command)` applies the state transitions and returns the `(left, right)`
wheel speeds: while balancing it runs the balance controller and mixes in
the turn command, otherwise it stops both motors and resets the
controller. Passing `gyro_rate=None` (IMU unreadable) stops the motors.
`handle_remote_command` requests a stand-up and, if a client is
connected, sends a status notification.

## What the package does not do

It talks to no hardware. There are no drivers for the IMU, GPS, wheel
encoders or battery ADC, no GPIO or PWM access (motors and servo hand
their outputs to callables you supply), and no Bluetooth stack:
`BleController` only receives events and calls a `send` function you
provide. There is no task scheduler or main loop; you call
`Robot.balance_step`, `ServoStandup.update` and the others from your own
loop. Persistence is whatever mapping you give `ConfigManager`. There is
no command-line program.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.