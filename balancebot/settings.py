"""Hardware assignments and tuning defaults for the balancing robot."""

# IMU (MPU6050 over I2C)
MPU6050_SDA_PIN = 6
MPU6050_SCL_PIN = 7
MPU6050_I2C_PORT = 0

# GPS module (UART1)
GPS_RX_PIN = 4
GPS_TX_PIN = 5
GPS_UART_PORT = 1
GPS_BAUDRATE = 9600

# Left motor and encoder
LEFT_MOTOR_A_PIN = 10
LEFT_MOTOR_B_PIN = 11
LEFT_MOTOR_EN_PIN = 8
LEFT_MOTOR_CHANNEL = 0
LEFT_ENC_A_PIN = 1
LEFT_ENC_B_PIN = 2

# Right motor and encoder
RIGHT_MOTOR_A_PIN = 20
RIGHT_MOTOR_B_PIN = 21
RIGHT_MOTOR_EN_PIN = 18
RIGHT_MOTOR_CHANNEL = 1
RIGHT_ENC_A_PIN = 22
RIGHT_ENC_B_PIN = 23

# Stand-up servo
SERVO_PIN = 19
SERVO_CHANNEL = 2

# Battery voltage sensing (2S lithium pack behind a divider)
BATTERY_ADC_PIN = 3
BATTERY_ADC_CHANNEL = 3
BATTERY_R1_KOHM = 10.0
BATTERY_R2_KOHM = 3.3
BATTERY_MAX_VOLTAGE = 8.4
BATTERY_MIN_VOLTAGE = 6.0
BATTERY_LOW_THRESHOLD = 6.8
BATTERY_CRITICAL_THRESHOLD = 6.4

# Balance PID
BALANCE_PID_KP = 50.0
BALANCE_PID_KI = 0.5
BALANCE_PID_KD = 2.0
PID_OUTPUT_MIN = -255.0
PID_OUTPUT_MAX = 255.0

# Kalman filter noise
KALMAN_Q_ANGLE = 0.001
KALMAN_Q_BIAS = 0.003
KALMAN_R_MEASURE = 0.03

# Robot geometry
WHEEL_DIAMETER_CM = 6.5
ENCODER_PPR = 360

# State machine thresholds
FALLEN_ANGLE_THRESHOLD = 45.0
BALANCE_ANGLE_TARGET = 0.0
STANDUP_ANGLE_TOLERANCE = 5.0
RECOVERY_TIMEOUT_MS = 30000

# Servo angles (degrees)
SERVO_EXTENDED_ANGLE = 90
SERVO_RETRACTED_ANGLE = 0

# Task stacks, priorities and periods
SENSOR_TASK_STACK = 4096
BALANCE_TASK_STACK = 4096
STATUS_TASK_STACK = 4096
SENSOR_TASK_PRIORITY = 5
BALANCE_TASK_PRIORITY = 4
STATUS_TASK_PRIORITY = 3
SENSOR_UPDATE_RATE_MS = 20
BALANCE_UPDATE_RATE_MS = 20
STATUS_UPDATE_RATE_MS = 1000

# Communication
BLE_DEVICE_NAME = "BalanceBot"
STATUS_BUFFER_SIZE = 128

# System
WATCHDOG_TIMEOUT_MS = 5000
MAX_INIT_RETRIES = 3
ERROR_RECOVERY_DELAY_MS = 1000